"""Client-side WebSocket helpers.

The connection entry point lives in :mod:`.manager`; it is imported from
there directly so the session package can use these helpers without a cycle.
"""

from .helpers import (
    close_client,
    client_label,
    safe_send_json,
    safe_send_payload,
    client_is_connected,
)
from .disconnects import is_expected_disconnect
from .errors import send_error, send_upstream_error, reject_connection
from .parser import parse_message_type, peek_message_type

__all__ = [
    "close_client",
    "client_label",
    "safe_send_json",
    "safe_send_payload",
    "client_is_connected",
    "is_expected_disconnect",
    "send_error",
    "send_upstream_error",
    "reject_connection",
    "parse_message_type",
    "peek_message_type",
]
