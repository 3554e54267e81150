"""Per-session liveness monitor (idle timeout and bounded reconnect).

Each relay session owns one monitor. Every ``check_interval_s`` it runs two
independent checks against the session:

1. Inactivity: when no message has crossed the relay in either direction for
   ``idle_timeout_s``, the session is told to shut down.
2. Upstream loss: when the client is still connected but the upstream is
   down, the session is asked for a reconnect. The session's
   :class:`ReconnectPolicy` decides whether an attempt is allowed.

This is the only place reconnects originate from.

Usage:
    monitor = LivenessMonitor(session)
    monitor.start()
    ...
    await monitor.stop()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Protocol
from collections.abc import Callable

from ...errors import InactivityTimeoutError
from ...config.websocket import RELAY_CHECK_INTERVAL_S, RELAY_IDLE_TIMEOUT_S

logger = logging.getLogger(__name__)


class LivenessTarget(Protocol):
    last_activity: float

    @property
    def client_open(self) -> bool: ...

    @property
    def upstream_down(self) -> bool: ...

    async def on_idle_timeout(self, err: InactivityTimeoutError) -> None: ...

    async def reconnect_upstream(self) -> bool: ...


class LivenessMonitor:
    """Periodic checker bound to one session.

    Attributes:
        check_interval_s: Seconds between checks.
        idle_timeout_s: Seconds of silence before the session is closed.
    """

    def __init__(
        self,
        target: LivenessTarget,
        *,
        check_interval_s: float | None = None,
        idle_timeout_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._target = target
        self.check_interval_s = float(check_interval_s or RELAY_CHECK_INTERVAL_S)
        self.idle_timeout_s = float(idle_timeout_s or RELAY_IDLE_TIMEOUT_S)
        self._clock = clock
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._idle_timed_out = False

    def idle_timed_out(self) -> bool:
        return self._idle_timed_out

    def idle_seconds(self) -> float:
        return self._clock() - self._target.last_activity

    def start(self) -> asyncio.Task:
        """Start the monitor task (idempotent)."""
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
        return self._task

    async def stop(self) -> None:
        """Stop the monitor; safe to call from inside a check."""
        self._stop_event.set()
        task, self._task = self._task, None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

    async def check(self) -> bool:
        """Run one round of checks. Returns False once the session was closed."""
        idle = self.idle_seconds()
        if idle >= self.idle_timeout_s:
            logger.info("liveness: idle for %.1fs (limit %.1fs); closing session", idle, self.idle_timeout_s)
            self._idle_timed_out = True
            await self._target.on_idle_timeout(InactivityTimeoutError(idle))
            return False
        if self._target.client_open and self._target.upstream_down:
            await self._target.reconnect_upstream()
        return True

    async def _loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self.check_interval_s)
                if self._stop_event.is_set():
                    break
                if not await self.check():
                    break
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("liveness: monitor exiting due to unexpected error")


__all__ = ["LivenessMonitor", "LivenessTarget"]
