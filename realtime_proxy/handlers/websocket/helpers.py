"""Safe send/close helpers for the client-side WebSocket.

Every helper tolerates a client that has already gone away: sends report
``False`` instead of raising, and closing a closed socket is a no-op.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Any

from fastapi import WebSocket
from fastapi.websockets import WebSocketState

from .disconnects import is_expected_disconnect

logger = logging.getLogger(__name__)


def client_is_connected(ws: WebSocket) -> bool:
    """True while both directions of the client socket are usable."""
    return (
        getattr(ws, "client_state", None) == WebSocketState.CONNECTED
        and getattr(ws, "application_state", WebSocketState.CONNECTED) == WebSocketState.CONNECTED
    )


def client_label(ws: WebSocket) -> str:
    client = getattr(ws, "client", None)
    if client is None:
        return "-"
    return f"{client.host}:{client.port}"


async def safe_send_payload(ws: WebSocket, payload: str | bytes) -> bool:
    """Send a raw frame to the client, returning False if the socket is gone.

    Text stays text and binary stays binary.
    """
    if not client_is_connected(ws):
        return False
    try:
        if isinstance(payload, (bytes, bytearray)):
            await ws.send_bytes(bytes(payload))
        else:
            await ws.send_text(payload)
    except Exception as exc:
        if not is_expected_disconnect(exc):
            raise
        logger.info("client disconnected while sending %s bytes", len(payload))
        return False
    return True


async def safe_send_json(ws: WebSocket, payload: dict[str, Any]) -> bool:
    """Send a JSON payload, swallowing client disconnects."""
    return await safe_send_payload(ws, json.dumps(payload))


async def close_client(ws: WebSocket, code: int, reason: str = "") -> None:
    """Close the client socket with an explicit code if it is still open."""
    if getattr(ws, "application_state", WebSocketState.CONNECTED) != WebSocketState.CONNECTED:
        return
    if getattr(ws, "client_state", None) == WebSocketState.DISCONNECTED:
        return
    with contextlib.suppress(Exception):
        await ws.close(code=code, reason=reason)


__all__ = [
    "client_is_connected",
    "client_label",
    "safe_send_payload",
    "safe_send_json",
    "close_client",
]
