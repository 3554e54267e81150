"""Client receive loop feeding a relay session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from ..session.relay import RelaySession
from ...config.websocket import RELAY_RECV_TICK_S

logger = logging.getLogger(__name__)


async def _receive_with_tick(ws: WebSocket, tick_s: float) -> dict[str, Any] | None:
    try:
        return await asyncio.wait_for(ws.receive(), timeout=tick_s)
    except asyncio.TimeoutError:
        return None


def _frame_payload(message: dict[str, Any]) -> str | bytes | None:
    text = message.get("text")
    if text is not None:
        return text
    return message.get("bytes")


async def run_client_loop(
    ws: WebSocket,
    session: RelaySession,
    *,
    tick_s: float = RELAY_RECV_TICK_S,
) -> int | None:
    """Pump client frames into the session until either side is done.

    The receive is bounded by ``tick_s`` so a session terminated by its
    liveness monitor or by the registry sweep ends the loop promptly.

    Returns:
        The client's close code when it disconnected, else None.
    """
    while session.accepting:
        message = await _receive_with_tick(ws, tick_s)
        if message is None:
            continue
        if message.get("type") == "websocket.disconnect":
            code = message.get("code")
            logger.info("client disconnected code=%s", code)
            return code
        payload = _frame_payload(message)
        if payload is None:
            continue
        await session.handle_client_message(payload)
    return None


__all__ = ["run_client_loop"]
