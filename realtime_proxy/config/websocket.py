"""WebSocket runtime configuration values.

Timers:
    RELAY_CHECK_INTERVAL_S: How often each session's liveness monitor runs.
        Also the minimum spacing between two upstream reconnect attempts.

    RELAY_IDLE_TIMEOUT_S: Close both sides after this many seconds without a
        message from either direction.

    RELAY_CONFIG_GRACE_S: After the upstream opens, client traffic is held
        for at most this long while waiting for ``session.updated``.

    RELAY_SWEEP_INTERVAL_S: Period of the process-wide sweep that reaps
        sessions whose client transport has gone away.

    RELAY_RECV_TICK_S: Receive timeout used by the client loop so it notices
        sessions terminated from the monitor or the sweep.

Close Codes (RFC 6455):
    1000: Normal closure
    1001: Going away (server shutdown)
    1011: Upstream failure
    1013: Try again later (at capacity)
    4000+: Application-defined (idle timeout)
"""

from __future__ import annotations

import os

# ============================================================================
# Paths
# ============================================================================

WS_RELAY_PATH = os.getenv("WS_RELAY_PATH", "/api/qwen-realtime")

# ============================================================================
# Timer Configuration
# ============================================================================

RELAY_CHECK_INTERVAL_S = float(os.getenv("RELAY_CHECK_INTERVAL_S", "30"))
RELAY_IDLE_TIMEOUT_S = float(os.getenv("RELAY_IDLE_TIMEOUT_S", "300"))  # 5 minutes
RELAY_CONFIG_GRACE_S = float(os.getenv("RELAY_CONFIG_GRACE_S", "1.0"))
RELAY_SWEEP_INTERVAL_S = float(os.getenv("RELAY_SWEEP_INTERVAL_S", "30"))
RELAY_RECV_TICK_S = float(os.getenv("RELAY_RECV_TICK_S", "5"))

# ============================================================================
# Reconnect Policy
# ============================================================================

RELAY_MAX_CONSECUTIVE_DROPS = int(os.getenv("RELAY_MAX_CONSECUTIVE_DROPS", "1"))

# ============================================================================
# Capacity (0 disables the limit)
# ============================================================================

RELAY_MAX_SESSIONS = int(os.getenv("RELAY_MAX_SESSIONS", "0"))

# ============================================================================
# WebSocket Close Codes
# ============================================================================

WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_GOING_AWAY_CODE = 1001
WS_CLOSE_ABNORMAL_CODE = 1006
WS_CLOSE_UPSTREAM_FAILURE_CODE = int(os.getenv("WS_CLOSE_UPSTREAM_FAILURE_CODE", "1011"))
WS_CLOSE_BUSY_CODE = int(os.getenv("WS_CLOSE_BUSY_CODE", "1013"))
WS_CLOSE_IDLE_CODE = int(os.getenv("WS_CLOSE_IDLE_CODE", "4000"))

WS_CLOSE_IDLE_REASON = "idle_timeout"
WS_CLOSE_UPSTREAM_CLOSED_REASON = "upstream_closed"
WS_CLOSE_CLIENT_CLOSED_REASON = "client_closed"
WS_CLOSE_SHUTDOWN_REASON = "server_shutdown"
WS_CLOSE_BUSY_REASON = "server_at_capacity"

# ============================================================================
# Uvicorn transport keepalive
# ============================================================================

WS_PING_INTERVAL_S = float(os.getenv("WS_PING_INTERVAL_S", "30"))
WS_PING_TIMEOUT_S = float(os.getenv("WS_PING_TIMEOUT_S", "30"))

__all__ = [
    "WS_RELAY_PATH",
    "RELAY_CHECK_INTERVAL_S",
    "RELAY_IDLE_TIMEOUT_S",
    "RELAY_CONFIG_GRACE_S",
    "RELAY_SWEEP_INTERVAL_S",
    "RELAY_RECV_TICK_S",
    "RELAY_MAX_CONSECUTIVE_DROPS",
    "RELAY_MAX_SESSIONS",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_GOING_AWAY_CODE",
    "WS_CLOSE_ABNORMAL_CODE",
    "WS_CLOSE_UPSTREAM_FAILURE_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_UPSTREAM_CLOSED_REASON",
    "WS_CLOSE_CLIENT_CLOSED_REASON",
    "WS_CLOSE_SHUTDOWN_REASON",
    "WS_CLOSE_BUSY_REASON",
    "WS_PING_INTERVAL_S",
    "WS_PING_TIMEOUT_S",
]
