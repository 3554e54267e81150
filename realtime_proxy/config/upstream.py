"""Upstream realtime API connection settings.

Credential:
    QWEN_API_KEY is read once at import. A missing key does not stop the
    server from starting; every upstream handshake will then be rejected
    with an authentication failure.

Endpoint:
    The model name is appended as the ``model`` query parameter of
    QWEN_API_URL for each connection.
"""

from __future__ import annotations

import os


QWEN_API_KEY = os.getenv("QWEN_API_KEY", "")
QWEN_API_URL = os.getenv("QWEN_API_URL", "wss://dashscope.aliyuncs.com/api-ws/v1/realtime")
DEFAULT_MODEL = os.getenv("QWEN_DEFAULT_MODEL", "qwen-omni-turbo-realtime")

UPSTREAM_USER_AGENT = os.getenv("UPSTREAM_USER_AGENT", "QwenProxy/1.0")
UPSTREAM_OPEN_TIMEOUT_S = float(os.getenv("UPSTREAM_OPEN_TIMEOUT_S", "10"))
UPSTREAM_CLOSE_TIMEOUT_S = float(os.getenv("UPSTREAM_CLOSE_TIMEOUT_S", "5"))
UPSTREAM_MAX_MESSAGE_BYTES = int(os.getenv("UPSTREAM_MAX_MESSAGE_BYTES", str(16 * 1024 * 1024)))


__all__ = [
    "QWEN_API_KEY",
    "QWEN_API_URL",
    "DEFAULT_MODEL",
    "UPSTREAM_USER_AGENT",
    "UPSTREAM_OPEN_TIMEOUT_S",
    "UPSTREAM_CLOSE_TIMEOUT_S",
    "UPSTREAM_MAX_MESSAGE_BYTES",
]
