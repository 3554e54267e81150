"""Per-connection logging context.

Each client connection runs in its own asyncio task, so its relay identity
is kept in context variables and stamped onto every log record by a record
factory. Tasks spawned from the connection task (upstream reader, liveness
monitor, deferred flush) inherit the values automatically.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import Token, ContextVar

_UNSET = "-"

_CONTEXT: dict[str, ContextVar[str]] = {
    "session_id": ContextVar("session_id", default=_UNSET),
    "client_id": ContextVar("client_id", default=_UNSET),
    "model": ContextVar("model", default=_UNSET),
}

_factory_installed = False


def current_log_context() -> dict[str, str]:
    """Snapshot of the context fields visible to the current task."""
    return {name: var.get() for name, var in _CONTEXT.items()}


@contextmanager
def log_context(**fields: str | None) -> Iterator[None]:
    """Bind relay context fields for the duration of a block.

    Unknown field names raise ``KeyError``; ``None`` values are skipped.
    """
    bound = [(_CONTEXT[name], str(value)) for name, value in fields.items() if value is not None]
    tokens: list[tuple[ContextVar[str], Token[str]]] = [(var, var.set(value)) for var, value in bound]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def install_log_context() -> None:
    """Stamp the context fields onto every LogRecord (idempotent)."""
    global _factory_installed  # noqa: PLW0603
    if _factory_installed:
        return
    base_factory = logging.getLogRecordFactory()

    def relay_record_factory(*args, **kwargs):
        record = base_factory(*args, **kwargs)
        for name, var in _CONTEXT.items():
            setattr(record, name, var.get())
        return record

    logging.setLogRecordFactory(relay_record_factory)
    _factory_installed = True


def configure_logging() -> None:
    """Set up root logging once per process and quiet chatty libraries."""
    from realtime_proxy.config.logging import (  # noqa: PLC0415
        APP_LOG_LEVEL,
        APP_LOG_FORMAT,
        APP_LOG_DATEFMT,
        LIBRARY_LOG_LEVEL,
        QUIET_LIBRARY_LOGGERS,
    )

    install_log_context()
    formatter = logging.Formatter(APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setFormatter(formatter)
    root.setLevel(APP_LOG_LEVEL)

    logging.getLogger("realtime_proxy").setLevel(APP_LOG_LEVEL)
    for name in QUIET_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(LIBRARY_LOG_LEVEL)


__all__ = [
    "current_log_context",
    "install_log_context",
    "log_context",
    "configure_logging",
]
