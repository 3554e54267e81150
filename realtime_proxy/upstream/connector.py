"""Outbound connection to the realtime API.

The connector owns at most one live ``websockets`` client connection. Each
call to :meth:`UpstreamConnector.connect` closes the previous connection (if
any), bumps ``generation`` and starts a reader task that reports events to the
bound listener:

    on_upstream_open()          handshake completed
    on_upstream_message(data)   every inbound frame, unmodified
    on_upstream_error(err)      classified failure (handshake or transport)
    on_upstream_close(code, r)  connection gone; also follows a failed handshake

The connector never reconnects by itself. Retry decisions belong to the
session's liveness monitor.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from urllib.parse import urlencode
from collections.abc import Callable
from typing import Any

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from .state import UpstreamState
from .listener import UpstreamListener
from ..errors import UpstreamError, UpstreamNotReadyError, classify_upstream_error
from ..config.websocket import WS_CLOSE_ABNORMAL_CODE, WS_CLOSE_NORMAL_CODE
from ..config.upstream import (
    QWEN_API_KEY,
    QWEN_API_URL,
    DEFAULT_MODEL,
    UPSTREAM_USER_AGENT,
    UPSTREAM_OPEN_TIMEOUT_S,
    UPSTREAM_CLOSE_TIMEOUT_S,
    UPSTREAM_MAX_MESSAGE_BYTES,
)

logger = logging.getLogger(__name__)

ConnectFn = Callable[..., Any]


class UpstreamConnector:
    """Single-session owner of the realtime API connection.

    Attributes:
        state: Current :class:`UpstreamState`.
        generation: Identifier of the most recent connection instance.
        model: Model requested by the most recent connect.
    """

    def __init__(
        self,
        listener: UpstreamListener | None = None,
        *,
        api_key: str | None = None,
        base_url: str = QWEN_API_URL,
        user_agent: str = UPSTREAM_USER_AGENT,
        open_timeout_s: float = UPSTREAM_OPEN_TIMEOUT_S,
        close_timeout_s: float = UPSTREAM_CLOSE_TIMEOUT_S,
        max_message_bytes: int | None = UPSTREAM_MAX_MESSAGE_BYTES,
        connect_fn: ConnectFn = connect,
    ) -> None:
        self._listener = listener
        self._api_key = QWEN_API_KEY if api_key is None else api_key
        self._base_url = base_url
        self._user_agent = user_agent
        self._open_timeout_s = open_timeout_s
        self._close_timeout_s = close_timeout_s
        self._max_message_bytes = max_message_bytes
        self._connect_fn = connect_fn
        self._ws = None
        self._task: asyncio.Task | None = None
        self.state = UpstreamState.CLOSED
        self.generation = 0
        self.model: str | None = None

    def bind(self, listener: UpstreamListener) -> None:
        self._listener = listener

    @property
    def is_open(self) -> bool:
        return self.state is UpstreamState.OPEN and self._ws is not None

    def build_url(self, model: str) -> str:
        separator = "&" if "?" in self._base_url else "?"
        return f"{self._base_url}{separator}{urlencode({'model': model})}"

    def build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def connect(self, model: str | None = None) -> int:
        """Start a new connection attempt and return its generation."""
        if self._listener is None:
            raise RuntimeError("UpstreamConnector.connect called before a listener was bound")
        await self._release(WS_CLOSE_NORMAL_CODE, "reconnecting")
        self.generation += 1
        self.model = model or DEFAULT_MODEL
        self.state = UpstreamState.CONNECTING
        logger.info("upstream: connecting generation=%s url=%s", self.generation, self.build_url(self.model))
        self._task = asyncio.create_task(self._run(self.generation, self.model))
        return self.generation

    async def send(self, payload: str | bytes) -> None:
        """Transmit one frame; raises UpstreamNotReadyError when not open."""
        if not self.is_open:
            raise UpstreamNotReadyError(f"upstream state is {self.state.value}")
        try:
            await self._ws.send(payload)
        except ConnectionClosed as exc:
            raise UpstreamNotReadyError("upstream connection closed during send") from exc

    async def close(self, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        """Close the live connection without reporting a close event."""
        await self._release(code, reason)
        self.state = UpstreamState.CLOSED

    async def _release(self, code: int, reason: str) -> None:
        ws, task = self._ws, self._task
        self._ws = None
        self._task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close(code=code, reason=reason)

    def _is_current(self, generation: int) -> bool:
        return generation == self.generation

    async def _open(self, url: str):
        return await self._connect_fn(
            url,
            additional_headers=self.build_headers(),
            user_agent_header=self._user_agent,
            open_timeout=self._open_timeout_s,
            close_timeout=self._close_timeout_s,
            max_size=self._max_message_bytes,
            compression=None,
        )

    async def _report_error(self, generation: int, exc: BaseException) -> UpstreamError:
        err = classify_upstream_error(exc, secret=self._api_key)
        logger.warning(
            "upstream: error generation=%s kind=%s status=%s detail=%s",
            generation,
            err.kind,
            err.status_code,
            err.detail,
        )
        if self._is_current(generation):
            self.state = UpstreamState.ERRORED
            await self._listener.on_upstream_error(err)
        return err

    async def _deliver(self, generation: int, message: str | bytes) -> None:
        """Hand one frame to the listener; its failures never end the connection."""
        try:
            await self._listener.on_upstream_message(message)
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            logger.exception("upstream: listener failed on frame generation=%s; connection kept", generation)

    async def _run(self, generation: int, model: str) -> None:
        try:
            ws = await self._open(self.build_url(model))
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            await self._report_error(generation, exc)
            if self._is_current(generation):
                await self._listener.on_upstream_close(WS_CLOSE_ABNORMAL_CODE, "connect_failed")
            return

        if not self._is_current(generation):
            with contextlib.suppress(Exception):
                await ws.close()
            return

        self._ws = ws
        self.state = UpstreamState.OPEN
        logger.info("upstream: open generation=%s model=%s", generation, model)
        await self._listener.on_upstream_open()

        transport_failed = False
        try:
            async for message in ws:
                await self._deliver(generation, message)
        except ConnectionClosed:
            pass
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            transport_failed = True
            await self._report_error(generation, exc)

        # close() already released this connection; nothing left to report
        if not self._is_current(generation) or self._ws is not ws:
            return
        if transport_failed:
            with contextlib.suppress(Exception):
                await ws.close()
            code, reason = WS_CLOSE_ABNORMAL_CODE, "transport_error"
        else:
            code = ws.close_code if ws.close_code is not None else WS_CLOSE_ABNORMAL_CODE
            reason = ws.close_reason or ""
        self._ws = None
        if self.state is not UpstreamState.ERRORED:
            self.state = UpstreamState.CLOSED
        logger.info("upstream: closed generation=%s code=%s reason=%s", generation, code, reason)
        await self._listener.on_upstream_close(code, reason)


__all__ = ["UpstreamConnector"]
