"""Process-wide registry of active relay sessions.

This module tracks every live :class:`RelaySession` and provides:

- Admission control (optional cap on concurrent sessions)
- Capacity info for the health endpoint
- A periodic sweep that terminates sessions whose client transport is gone
- Shutdown drain that closes every session with "going away"

Sessions never reach into each other; the registry is only mutated when a
client connects or disconnects. Transport-level pings are sent by uvicorn
(``ws_ping_interval``); the sweep reaps what those pings have already torn
down, independently of each session's own liveness monitor.

Example:
    registry = SessionRegistry(max_sessions=100)

    async def handle(ws):
        session = RelaySession(ws)
        if not await registry.add(session):
            ...  # reject
        try:
            ...
        finally:
            await registry.discard(session)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from .websocket.helpers import client_is_connected
from ..config.websocket import (
    RELAY_MAX_SESSIONS,
    RELAY_SWEEP_INTERVAL_S,
    WS_CLOSE_GOING_AWAY_CODE,
    WS_CLOSE_SHUTDOWN_REASON,
)

if TYPE_CHECKING:
    from .session.relay import RelaySession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Tracks active relay sessions and reaps dead ones.

    Attributes:
        max_sessions: Maximum concurrent sessions; 0 means unlimited.
        sweep_interval_s: Seconds between sweeps.
        active_sessions: Set of currently registered sessions.
    """

    def __init__(
        self,
        max_sessions: int = RELAY_MAX_SESSIONS,
        sweep_interval_s: float = RELAY_SWEEP_INTERVAL_S,
    ) -> None:
        self.max_sessions = max(0, int(max_sessions))
        self.sweep_interval_s = float(sweep_interval_s)
        self.active_sessions: set[RelaySession] = set()
        self._lock = asyncio.Lock()
        self._sweeper: asyncio.Task | None = None

    async def add(self, session: RelaySession) -> bool:
        """Register a session; False when the registry is at capacity."""
        async with self._lock:
            if self.max_sessions and len(self.active_sessions) >= self.max_sessions:
                logger.warning(
                    "Session rejected: at capacity (%s/%s)",
                    len(self.active_sessions),
                    self.max_sessions,
                )
                return False
            self.active_sessions.add(session)
            logger.info("Session registered: %s active", len(self.active_sessions))
            return True

    async def discard(self, session: RelaySession) -> None:
        async with self._lock:
            if session in self.active_sessions:
                self.active_sessions.remove(session)
                logger.info("Session removed: %s active", len(self.active_sessions))

    def count(self) -> int:
        return len(self.active_sessions)

    def snapshot(self) -> list[RelaySession]:
        return list(self.active_sessions)

    def get_capacity_info(self) -> dict:
        active = len(self.active_sessions)
        return {
            "active": active,
            "max": self.max_sessions or None,
            "at_capacity": bool(self.max_sessions) and active >= self.max_sessions,
        }

    async def sweep(self) -> int:
        """Terminate sessions whose client is no longer connected.

        Returns:
            Number of sessions reaped.
        """
        reaped = 0
        for session in self.snapshot():
            if session.is_terminated:
                await self.discard(session)
                reaped += 1
                continue
            if client_is_connected(session.client):
                continue
            logger.info("sweep: client of session %s unresponsive; terminating", session.session_id)
            await session.terminate(WS_CLOSE_GOING_AWAY_CODE, "client_unresponsive")
            await self.discard(session)
            reaped += 1
        return reaped

    def start_sweeper(self) -> asyncio.Task:
        """Start the periodic sweep task (idempotent)."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop())
        return self._sweeper

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

    async def close_all(
        self,
        code: int = WS_CLOSE_GOING_AWAY_CODE,
        reason: str = WS_CLOSE_SHUTDOWN_REASON,
    ) -> int:
        """Terminate every registered session (server shutdown)."""
        sessions = self.snapshot()
        for session in sessions:
            with contextlib.suppress(Exception):
                await session.terminate(code, reason)
            await self.discard(session)
        if sessions:
            logger.info("Closed %s sessions (%s)", len(sessions), reason)
        return len(sessions)

    async def _sweep_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.sweep_interval_s)
                reaped = await self.sweep()
                if reaped:
                    logger.info("sweep: reaped %s sessions; %s active", reaped, self.count())
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("sweep: loop exiting due to unexpected error")


__all__ = ["SessionRegistry"]
