"""Primary WebSocket connection handler orchestration.

Entry point for every client connection on the relay path:

1. Admission:
   - Register a new relay session (rejects with 1013 when at capacity)
   - Accept the WebSocket

2. Relay:
   - Start the session (liveness monitor + first upstream connect)
   - Pump client frames into the session

3. Cleanup:
   - Terminate the session (closes the upstream, cancels timers)
   - Remove it from the registry
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import WebSocket

from .errors import reject_connection
from .message_loop import run_client_loop
from .helpers import client_label
from .disconnects import is_expected_disconnect
from ..registry import SessionRegistry
from ..session.relay import RelaySession
from ...logging import log_context
from ...upstream import UpstreamConnector
from ...telemetry import capture_error, get_metrics
from ...config.upstream import DEFAULT_MODEL
from ...config.session import ERROR_CODE_PROXY
from ...config.websocket import (
    WS_CLOSE_BUSY_CODE,
    WS_CLOSE_BUSY_REASON,
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_CLIENT_CLOSED_REASON,
)

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[], UpstreamConnector]


def resolve_model(ws: WebSocket) -> str:
    """Model from the ``model`` query parameter, or the default."""
    model = (ws.query_params.get("model") or "").strip()
    return model or DEFAULT_MODEL


async def _admit(ws: WebSocket, session: RelaySession, registry: SessionRegistry) -> bool:
    if not await registry.add(session):
        get_metrics().sessions_rejected_total.add(1)
        capacity = registry.get_capacity_info()
        await reject_connection(
            ws,
            code=ERROR_CODE_PROXY,
            message=f"Proxy is at capacity ({capacity['active']}/{capacity['max']}); try again later",
            close_code=WS_CLOSE_BUSY_CODE,
            close_reason=WS_CLOSE_BUSY_REASON,
        )
        return False
    await ws.accept()
    return True


async def handle_websocket_connection(
    ws: WebSocket,
    registry: SessionRegistry,
    *,
    connector_factory: ConnectorFactory | None = None,
) -> None:
    """Relay one client connection until either side closes.

    Args:
        ws: The incoming WebSocket connection from FastAPI.
        registry: Registry the session is tracked in.
        connector_factory: Builds the upstream connector (tests inject fakes).
    """
    model = resolve_model(ws)
    connector = connector_factory() if connector_factory is not None else None
    session = RelaySession(ws, model=model, connector=connector)

    with log_context(session_id=session.session_id, client_id=client_label(ws), model=model):
        if not await _admit(ws, session, registry):
            return
        logger.info("client connected model=%s active=%s", model, registry.count())

        try:
            await session.start()
            await run_client_loop(ws, session)
        except Exception as exc:  # noqa: BLE001
            if not is_expected_disconnect(exc):
                logger.exception("relay error")
                capture_error(exc, session_id=session.session_id)
        finally:
            await session.terminate(WS_CLOSE_NORMAL_CODE, WS_CLOSE_CLIENT_CLOSED_REASON)
            await registry.discard(session)
            logger.info("client connection closed. Active: %s", registry.count())


__all__ = ["handle_websocket_connection", "resolve_model"]
