"""Per-client relay session.

A :class:`RelaySession` pairs one accepted client WebSocket with one
:class:`UpstreamConnector` and moves frames between them unchanged.

State machine:

    CONNECTING -> OPEN -> (ERRORED | CLOSING) -> TERMINATED

- CONNECTING: the connector has been dispatched. Client frames are queued in
  the pending buffer, never dropped.
- OPEN: the upstream is up. ``proxy.connected`` goes to the client, the
  configurator sends ``session.update`` and the buffer is flushed once, either
  on ``session.updated`` or when the configuration grace window runs out.
  Afterwards frames pass straight through.
- ERRORED: the upstream reported a failure. The client gets a sanitized
  ``error`` frame; the close event that follows decides between a reconnect
  (back to CONNECTING) and teardown.
- CLOSING: one side is gone; the other is closed with an explicit code.
- TERMINATED: connector closed, buffer discarded, timers cancelled.

Only the liveness monitor reconnects. Frame handlers never do.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable

from fastapi import WebSocket

from .state import SessionState
from .retry import ReconnectPolicy
from .buffer import Payload, PendingMessageBuffer
from .liveness import LivenessMonitor
from .configurator import SessionConfigurator
from ..websocket.parser import peek_message_type, preview
from ..websocket.errors import send_upstream_error
from ..websocket.helpers import (
    close_client,
    safe_send_json,
    client_is_connected,
    safe_send_payload,
)
from ...upstream import UpstreamConnector
from ...telemetry import add_breadcrumb, capture_error, get_metrics
from ...errors import (
    UpstreamError,
    InactivityTimeoutError,
    UpstreamUnexpectedCloseError,
)
from ...messages import build_not_ready, build_proxy_connected, build_system_info
from ...config.upstream import DEFAULT_MODEL
from ...config.websocket import (
    RELAY_CONFIG_GRACE_S,
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_ABNORMAL_CODE,
    RELAY_MAX_CONSECUTIVE_DROPS,
    WS_CLOSE_UPSTREAM_FAILURE_CODE,
    WS_CLOSE_UPSTREAM_CLOSED_REASON,
)
from ...config.session import (
    SESSION_UPDATE_TYPE,
    SESSION_UPDATED_TYPE,
    PAYLOAD_PREVIEW_CHARS,
    UPSTREAM_LOST_MESSAGE,
    UPSTREAM_RESTORED_MESSAGE,
)

logger = logging.getLogger(__name__)

_CLIENT_MARKERS = (SESSION_UPDATE_TYPE,)
_UPSTREAM_MARKERS = (SESSION_UPDATED_TYPE,)


class RelaySession:
    """Coordinator for one client connection and its upstream link.

    Attributes:
        session_id: Short random identifier used in logs.
        client: The accepted client WebSocket.
        model: Realtime model requested by the client.
        connector: Owner of the upstream connection.
        buffer: Client frames waiting for the upstream.
        configurator: Tracks the ``session.update`` handshake.
        policy: Bounded reconnect policy.
        monitor: Liveness monitor driving idle timeout and reconnects.
        state: Current :class:`SessionState`.
        upstream_connected: True while the upstream link is open.
        last_activity: Monotonic time of the last frame in either direction.
        close_reason: Reason recorded when the session started closing.
    """

    def __init__(
        self,
        client: WebSocket,
        *,
        model: str | None = None,
        connector: UpstreamConnector | None = None,
        check_interval_s: float | None = None,
        idle_timeout_s: float | None = None,
        grace_s: float = RELAY_CONFIG_GRACE_S,
        max_consecutive_drops: int = RELAY_MAX_CONSECUTIVE_DROPS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session_id = uuid.uuid4().hex[:12]
        self.client = client
        self.model = model or DEFAULT_MODEL
        self.connector = connector if connector is not None else UpstreamConnector()
        self.connector.bind(self)
        self.buffer = PendingMessageBuffer()
        self.configurator = SessionConfigurator()
        self.policy = ReconnectPolicy(max_consecutive_drops=max_consecutive_drops)
        self.monitor = LivenessMonitor(
            self,
            check_interval_s=check_interval_s,
            idle_timeout_s=idle_timeout_s,
            clock=clock,
        )
        self.state = SessionState.CONNECTING
        self.upstream_connected = False
        self.close_reason: str | None = None
        self._clock = clock
        self._grace_s = max(0.0, float(grace_s))
        self.last_activity = clock()
        self._started_at = clock()
        self._opened_at: float | None = None
        self._ever_opened = False
        self._flushing = False
        self._not_ready_notified = False
        self._deferred_flush: asyncio.Task | None = None
        self._started = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def session_configured(self) -> bool:
        return self.configurator.configured

    @property
    def accepting(self) -> bool:
        return self.state not in (SessionState.CLOSING, SessionState.TERMINATED)

    @property
    def is_terminated(self) -> bool:
        return self.state is SessionState.TERMINATED

    @property
    def client_open(self) -> bool:
        return self.accepting and client_is_connected(self.client)

    @property
    def upstream_down(self) -> bool:
        return self.connector.state.is_down

    def touch(self) -> None:
        self.last_activity = self._clock()

    def duration_s(self) -> float:
        return self._clock() - self._started_at

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the liveness monitor and dispatch the first upstream connect."""
        logger.info("session: start model=%s", self.model)
        self._started = True
        get_metrics().active_sessions.add(1)
        self.monitor.start()
        await self.connector.connect(self.model)

    async def terminate(self, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        """Close both sides and release everything (idempotent)."""
        if not self.accepting:
            return
        self.state = SessionState.CLOSING
        self.close_reason = reason
        self._cancel_deferred_flush()
        await self.monitor.stop()
        dropped = self.buffer.clear()
        self.upstream_connected = False
        self.configurator.reset()
        await self.connector.close(WS_CLOSE_NORMAL_CODE, reason)
        await close_client(self.client, code, reason)
        self.state = SessionState.TERMINATED
        duration = self.duration_s()
        if self._started:
            metrics = get_metrics()
            metrics.active_sessions.add(-1)
            metrics.session_duration.record(duration)
        logger.info(
            "session: terminated code=%s reason=%s duration=%.1fs dropped=%s",
            code,
            reason,
            duration,
            dropped,
        )

    # ------------------------------------------------------------------
    # Client -> upstream
    # ------------------------------------------------------------------

    async def handle_client_message(self, payload: Payload) -> bool:
        """Forward or queue one client frame. Returns False once closing."""
        if not self.accepting:
            return False
        self.touch()
        msg_type = peek_message_type(payload, _CLIENT_MARKERS, source="client")
        if self._can_forward_live(msg_type) and await self._forward_to_upstream(payload):
            return True
        depth = self.buffer.enqueue(payload)
        logger.debug("session: queued client frame depth=%s state=%s", depth, self.state.value)
        await self._notify_not_ready()
        self._schedule_deferred_flush()
        return True

    def _in_grace_window(self) -> bool:
        if self._opened_at is None or self.session_configured:
            return False
        return (self._clock() - self._opened_at) < self._grace_s

    def _can_forward_live(self, msg_type: str | None) -> bool:
        if not self.connector.is_open or self._flushing or len(self.buffer):
            return False
        if msg_type == SESSION_UPDATE_TYPE:
            return True
        return not self._in_grace_window()

    async def _transmit(self, payload: Payload) -> None:
        await self.connector.send(payload)
        get_metrics().messages_forwarded_total.add(1, {"direction": "client_to_upstream"})
        logger.debug("client -> upstream: %s", preview(payload, PAYLOAD_PREVIEW_CHARS))

    async def _forward_to_upstream(self, payload: Payload) -> bool:
        try:
            await self._transmit(payload)
        except UpstreamError as exc:
            logger.info("session: upstream send failed (%s); queueing frame", exc.kind)
            return False
        return True

    async def flush(self) -> int:
        """Drain the pending buffer into the open upstream, in order."""
        if self._flushing or not self.accepting or not self.connector.is_open:
            return 0
        self._flushing = True
        try:
            sent = await self.buffer.drain_into(
                self._transmit,
                is_available=lambda: self.accepting and self.connector.is_open,
            )
        finally:
            self._flushing = False
        if sent:
            logger.info("session: flushed %s queued frames; %s remain", sent, len(self.buffer))
        return sent

    def _schedule_deferred_flush(self) -> None:
        if not self.connector.is_open or not len(self.buffer):
            return
        if self._deferred_flush is not None and not self._deferred_flush.done():
            return
        remaining = 0.0
        if self._opened_at is not None and not self.session_configured:
            remaining = max(0.0, self._grace_s - (self._clock() - self._opened_at))
        self._deferred_flush = asyncio.create_task(self._flush_after(remaining))

    async def _flush_after(self, delay_s: float) -> None:
        await asyncio.sleep(delay_s)
        if self.accepting:
            await self.flush()

    def _cancel_deferred_flush(self) -> None:
        task, self._deferred_flush = self._deferred_flush, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _notify_not_ready(self) -> None:
        # only after an outage; queueing during the first connect is expected
        if not self._ever_opened or not self.upstream_down or self._not_ready_notified:
            return
        self._not_ready_notified = True
        await safe_send_json(self.client, build_not_ready())

    # ------------------------------------------------------------------
    # Upstream events
    # ------------------------------------------------------------------

    async def on_upstream_open(self) -> None:
        if not self.accepting:
            return
        reconnected = self._ever_opened
        self.state = SessionState.OPEN
        self.upstream_connected = True
        self._ever_opened = True
        self._not_ready_notified = False
        self._opened_at = self._clock()
        self.policy.record_success()
        self.touch()

        await safe_send_json(self.client, build_proxy_connected())
        if reconnected:
            await safe_send_json(self.client, build_system_info(UPSTREAM_RESTORED_MESSAGE))
        try:
            await self.configurator.configure(self.connector)
        except UpstreamError as exc:
            logger.warning("session: session.update could not be sent (%s)", exc.kind)

        if self._grace_s <= 0:
            await self.flush()
        else:
            self._schedule_deferred_flush()

    async def on_upstream_message(self, payload: Payload) -> None:
        if not self.accepting:
            return
        self.touch()
        acknowledged = False
        if peek_message_type(payload, _UPSTREAM_MARKERS, source="upstream") == SESSION_UPDATED_TYPE:
            acknowledged = self.configurator.acknowledge()
        if await safe_send_payload(self.client, payload):
            get_metrics().messages_forwarded_total.add(1, {"direction": "upstream_to_client"})
            logger.debug("upstream -> client: %s", preview(payload, PAYLOAD_PREVIEW_CHARS))
        if acknowledged:
            await self.flush()

    async def on_upstream_error(self, err: UpstreamError) -> None:
        if not self.accepting:
            return
        self.state = SessionState.ERRORED
        self.upstream_connected = False
        self.configurator.reset()
        get_metrics().upstream_errors_total.add(1, {"kind": err.kind})
        capture_error(err, session_id=self.session_id, extra={"kind": err.kind, "status": err.status_code})
        await send_upstream_error(self.client, err)

    async def on_upstream_close(self, code: int, reason: str) -> None:
        if not self.accepting:
            return
        was_open = self.upstream_connected
        self.upstream_connected = False
        self.configurator.reset()
        self._opened_at = None
        drops = self.policy.record_drop()
        logger.info("session: upstream closed code=%s reason=%s consecutive_drops=%s", code, reason, drops)
        add_breadcrumb("upstream closed", code=code, reason=reason, consecutive_drops=drops)

        if not client_is_connected(self.client):
            await self.terminate(WS_CLOSE_NORMAL_CODE, WS_CLOSE_UPSTREAM_CLOSED_REASON)
            return

        if self.policy.exhausted:
            err = UpstreamUnexpectedCloseError(f"code={code} reason={reason}")
            await send_upstream_error(self.client, err)
            close_code = WS_CLOSE_UPSTREAM_FAILURE_CODE if code == WS_CLOSE_ABNORMAL_CODE else WS_CLOSE_NORMAL_CODE
            await self.terminate(close_code, WS_CLOSE_UPSTREAM_CLOSED_REASON)
            return

        self.state = SessionState.CONNECTING
        if was_open:
            await safe_send_json(self.client, build_system_info(UPSTREAM_LOST_MESSAGE))

    # ------------------------------------------------------------------
    # Liveness hooks
    # ------------------------------------------------------------------

    async def on_idle_timeout(self, err: InactivityTimeoutError) -> None:
        get_metrics().idle_timeouts_total.add(1)
        logger.info("session: %s", err)
        await self.terminate(WS_CLOSE_IDLE_CODE, WS_CLOSE_IDLE_REASON)

    async def reconnect_upstream(self) -> bool:
        """Issue one reconnect if the policy allows it."""
        if not self.client_open or not self.upstream_down:
            return False
        if not self.policy.allow_attempt():
            return False
        self.policy.mark_attempt()
        get_metrics().reconnect_attempts_total.add(1)
        add_breadcrumb("upstream reconnect", attempt=self.policy.attempts, model=self.model)
        logger.info("session: reconnecting upstream attempt=%s", self.policy.attempts)
        self.state = SessionState.CONNECTING
        await self.connector.connect(self.model)
        return True


__all__ = ["RelaySession"]
