"""Log level and line format.

Every record carries the relay context of the connection it was emitted
for (``session_id``, ``client_id`` and ``model``); records logged outside a
connection show ``-`` for each field.
"""

import os


APP_LOG_LEVEL = (os.getenv("APP_LOG_LEVEL", "INFO") or "INFO").upper()
APP_LOG_FORMAT = os.getenv(
    "APP_LOG_FORMAT",
    "%(levelname)s %(asctime)s [%(name)s] [session=%(session_id)s client=%(client_id)s model=%(model)s] %(message)s",
)
APP_LOG_DATEFMT = os.getenv("APP_LOG_DATEFMT", "%Y-%m-%dT%H:%M:%S")

# The websocket client logs every frame at DEBUG; keep it out of app logs
# unless explicitly requested.
LIBRARY_LOG_LEVEL = (os.getenv("LIBRARY_LOG_LEVEL", "WARNING") or "WARNING").upper()
QUIET_LIBRARY_LOGGERS = ("websockets.client", "websockets.protocol", "uvicorn.access")


__all__ = [
    "APP_LOG_LEVEL",
    "APP_LOG_FORMAT",
    "APP_LOG_DATEFMT",
    "LIBRARY_LOG_LEVEL",
    "QUIET_LIBRARY_LOGGERS",
]
