"""Error frames and admission rejection for the client WebSocket.

All proxy-originated errors share one shape:

    {"type": "error", "error": {"message": "...", "code": "PROXY_ERROR"}}

Codes:
    - QWEN_ERROR: the realtime API rejected the proxy (credential or access)
    - NOT_READY: the realtime API link is down; client frames are queued
    - PROXY_ERROR: any other relay or transport failure
"""

from __future__ import annotations

from fastapi import WebSocket

from .helpers import safe_send_json
from ...errors import UpstreamError
from ...messages import build_error, build_upstream_error


async def send_error(ws: WebSocket, *, code: str, message: str) -> bool:
    """Send a structured error frame to the client."""
    return await safe_send_json(ws, build_error(code, message))


async def send_upstream_error(ws: WebSocket, err: UpstreamError) -> bool:
    """Send the sanitized client frame for a classified upstream failure."""
    return await safe_send_json(ws, build_upstream_error(err))


async def reject_connection(
    ws: WebSocket,
    *,
    code: str,
    message: str,
    close_code: int,
    close_reason: str = "",
) -> None:
    """Accept connection briefly to send an error, then close immediately.

    This pattern ensures the client receives a meaningful error message
    rather than just a raw close code.
    """
    await ws.accept()
    await send_error(ws, code=code, message=message)
    await ws.close(code=close_code, reason=close_reason)


__all__ = ["send_error", "send_upstream_error", "reject_connection"]
