"""Proxy-originated status and error frames sent to the client.

Shapes:
    {"type": "proxy.connected", "message": "...", "timestamp": "<iso8601>"}
    {"type": "system.info", "message": "..."}
    {"type": "error", "error": {"message": "...", "code": "QWEN_ERROR"}}
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..errors import UpstreamError
from ..config.session import (
    ERROR_TYPE,
    SYSTEM_INFO_TYPE,
    NOT_READY_MESSAGE,
    ERROR_CODE_NOT_READY,
    PROXY_CONNECTED_TYPE,
    PROXY_CONNECTED_MESSAGE,
)


def iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_proxy_connected(message: str = PROXY_CONNECTED_MESSAGE) -> dict[str, Any]:
    return {
        "type": PROXY_CONNECTED_TYPE,
        "message": message,
        "timestamp": iso_timestamp(),
    }


def build_system_info(message: str) -> dict[str, Any]:
    return {"type": SYSTEM_INFO_TYPE, "message": message}


def build_error(code: str, message: str) -> dict[str, Any]:
    return {"type": ERROR_TYPE, "error": {"message": message, "code": code}}


def build_upstream_error(err: UpstreamError) -> dict[str, Any]:
    """Client frame for a classified upstream failure.

    Only the fixed ``client_message`` of the error class is used; the raw
    detail stays in the logs.
    """
    return build_error(err.client_code, err.client_message)


def build_not_ready() -> dict[str, Any]:
    return build_error(ERROR_CODE_NOT_READY, NOT_READY_MESSAGE)


__all__ = [
    "iso_timestamp",
    "build_proxy_connected",
    "build_system_info",
    "build_error",
    "build_upstream_error",
    "build_not_ready",
]
