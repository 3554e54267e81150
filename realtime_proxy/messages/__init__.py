"""Builders for frames the proxy originates itself."""

from .session_update import build_session_update, encode_session_update
from .status import (
    build_error,
    iso_timestamp,
    build_not_ready,
    build_system_info,
    build_upstream_error,
    build_proxy_connected,
)

__all__ = [
    "build_session_update",
    "encode_session_update",
    "build_error",
    "iso_timestamp",
    "build_not_ready",
    "build_system_info",
    "build_upstream_error",
    "build_proxy_connected",
]
