"""Main FastAPI server for the realtime proxy.

This module wires the relay into an HTTP host. It provides:

- REST endpoints for service info and health checks (/, /health)
- WebSocket relay endpoint (/api/qwen-realtime by default)
- Periodic sweep of sessions whose client transport has gone away
- Graceful shutdown that closes every session with 1001

Server Lifecycle:
    1. On startup: activate telemetry, warn about a missing credential,
       start the session sweeper
    2. Accept WebSocket connections on the relay path; one relay session each
    3. On shutdown: stop the sweeper, close all sessions, flush telemetry

Example:
    Run directly with uvicorn:
        $ uvicorn realtime_proxy.server:app --host 0.0.0.0 --port 3000

    Or through the console script:
        $ qwen-realtime-proxy
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .logging import configure_logging
from .messages import iso_timestamp
from .telemetry import init_telemetry, shutdown_telemetry
from .handlers.instances import sessions
from .handlers.websocket.manager import handle_websocket_connection
from .config.upstream import QWEN_API_KEY
from .config.websocket import WS_RELAY_PATH, WS_PING_INTERVAL_S, WS_PING_TIMEOUT_S
from .config.server import (
    HOST,
    PORT,
    HEALTH_PATH,
    SERVICE_NAME,
    SERVICE_VERSION,
    CORS_ALLOW_ORIGINS,
    CORS_ALLOW_METHODS,
    CORS_ALLOW_HEADERS,
)

logger = logging.getLogger(__name__)

app = FastAPI(default_response_class=ORJSONResponse)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)

configure_logging()


@app.on_event("startup")
async def start_relay() -> None:
    """Activate telemetry and the session sweeper before accepting traffic."""
    init_telemetry()
    if QWEN_API_KEY:
        logger.info("upstream credential configured")
    else:
        logger.warning("QWEN_API_KEY is not set; upstream handshakes will be rejected")
    sessions.start_sweeper()
    logger.info("relay ready on %s (health: %s)", WS_RELAY_PATH, HEALTH_PATH)


@app.on_event("shutdown")
async def stop_relay() -> None:
    """Close every session with 1001 and flush telemetry."""
    await sessions.stop_sweeper()
    await sessions.close_all()
    shutdown_telemetry()


@app.get("/")
async def root():
    """Service identity and endpoint map."""
    return {
        "status": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "timestamp": iso_timestamp(),
        "endpoints": {
            "websocket": WS_RELAY_PATH,
            "health": HEALTH_PATH,
        },
    }


@app.get(HEALTH_PATH)
async def health():
    """Health check endpoint (no authentication required)."""
    return {
        "status": "healthy",
        "timestamp": iso_timestamp(),
        "sessions": sessions.get_capacity_info(),
    }


@app.websocket(WS_RELAY_PATH)
async def relay_endpoint(websocket: WebSocket):
    """Relay one client to the realtime API."""
    await handle_websocket_connection(websocket, sessions)


def main() -> None:
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        ws_ping_interval=WS_PING_INTERVAL_S,
        ws_ping_timeout=WS_PING_TIMEOUT_S,
    )


__all__ = ["app", "main"]
