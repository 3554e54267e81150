"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- upstream: realtime API endpoint, credential and handshake settings
- websocket: relay timers, close codes and capacity
- session: realtime protocol constants and proxy message texts
- server: HTTP host, port and CORS
- logging: log level and format
- telemetry: Sentry and OTel settings
"""

from .upstream import (
    QWEN_API_KEY,
    QWEN_API_URL,
    DEFAULT_MODEL,
    UPSTREAM_USER_AGENT,
    UPSTREAM_OPEN_TIMEOUT_S,
    UPSTREAM_CLOSE_TIMEOUT_S,
    UPSTREAM_MAX_MESSAGE_BYTES,
)
from .websocket import (
    WS_RELAY_PATH,
    RELAY_CHECK_INTERVAL_S,
    RELAY_IDLE_TIMEOUT_S,
    RELAY_CONFIG_GRACE_S,
    RELAY_SWEEP_INTERVAL_S,
    RELAY_RECV_TICK_S,
    RELAY_MAX_CONSECUTIVE_DROPS,
    RELAY_MAX_SESSIONS,
)
from .server import (
    HOST,
    PORT,
    SERVICE_NAME,
    SERVICE_VERSION,
    HEALTH_PATH,
)

__all__ = [
    "QWEN_API_KEY",
    "QWEN_API_URL",
    "DEFAULT_MODEL",
    "UPSTREAM_USER_AGENT",
    "UPSTREAM_OPEN_TIMEOUT_S",
    "UPSTREAM_CLOSE_TIMEOUT_S",
    "UPSTREAM_MAX_MESSAGE_BYTES",
    "WS_RELAY_PATH",
    "RELAY_CHECK_INTERVAL_S",
    "RELAY_IDLE_TIMEOUT_S",
    "RELAY_CONFIG_GRACE_S",
    "RELAY_SWEEP_INTERVAL_S",
    "RELAY_RECV_TICK_S",
    "RELAY_MAX_CONSECUTIVE_DROPS",
    "RELAY_MAX_SESSIONS",
    "HOST",
    "PORT",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "HEALTH_PATH",
]
