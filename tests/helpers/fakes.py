"""In-memory doubles for the client WebSocket and the upstream connector."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from collections import namedtuple

from fastapi.websockets import WebSocketState

from realtime_proxy.errors import UpstreamNotReadyError
from realtime_proxy.upstream import UpstreamState

Address = namedtuple("Address", ["host", "port"])


class FakeClientWebSocket:
    """Records everything the relay sends to the client."""

    def __init__(self, *, query: dict[str, str] | None = None) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.client = Address("127.0.0.1", 50000)
        self.query_params = dict(query or {})
        self.sent: list[str | bytes] = []
        self.close_calls: list[tuple[int, str]] = []
        self.accepted = False
        self._inbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        self.sent.append(data)

    async def send_bytes(self, data: bytes) -> None:
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED

    async def receive(self) -> dict[str, Any]:
        return await self._inbox.get()

    def push_text(self, text: str) -> None:
        self._inbox.put_nowait({"type": "websocket.receive", "text": text})

    def push_disconnect(self, code: int = 1000) -> None:
        self._inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    def go_away(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED

    def json_frames(self) -> list[dict[str, Any]]:
        return [json.loads(item) for item in self.sent if isinstance(item, str)]

    def frames_of_type(self, msg_type: str) -> list[dict[str, Any]]:
        return [frame for frame in self.json_frames() if frame.get("type") == msg_type]


class FakeConnector:
    """Upstream connector driven by the test instead of a network socket."""

    def __init__(self) -> None:
        self.state = UpstreamState.CLOSED
        self.generation = 0
        self.model: str | None = None
        self.sent: list[str | bytes] = []
        self.connect_calls: list[str | None] = []
        self.close_calls: list[tuple[int, str]] = []
        self.fail_sends = 0
        self.send_gate: asyncio.Event | None = None
        self.hold_payloads: set[str | bytes] = set()
        self.held: list[str | bytes] = []
        self._listener = None

    def bind(self, listener) -> None:
        self._listener = listener

    @property
    def is_open(self) -> bool:
        return self.state is UpstreamState.OPEN

    async def connect(self, model: str | None = None) -> int:
        self.connect_calls.append(model)
        self.model = model
        self.generation += 1
        self.state = UpstreamState.CONNECTING
        return self.generation

    async def send(self, payload: str | bytes) -> None:
        if not self.is_open:
            raise UpstreamNotReadyError("not open")
        if self.fail_sends:
            self.fail_sends -= 1
            raise UpstreamNotReadyError("send failed")
        if self.send_gate is not None and payload in self.hold_payloads:
            self.held.append(payload)
            await self.send_gate.wait()
        self.sent.append(payload)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))
        self.state = UpstreamState.CLOSED

    # -- test drivers -------------------------------------------------------

    async def open(self) -> None:
        self.state = UpstreamState.OPEN
        await self._listener.on_upstream_open()

    async def deliver(self, payload: str | bytes) -> None:
        await self._listener.on_upstream_message(payload)

    async def fail(self, err) -> None:
        self.state = UpstreamState.ERRORED
        await self._listener.on_upstream_error(err)

    async def drop(self, code: int = 1006, reason: str = "") -> None:
        if self.state is not UpstreamState.ERRORED:
            self.state = UpstreamState.CLOSED
        await self._listener.on_upstream_close(code, reason)

    def sent_types(self) -> list[str | None]:
        types: list[str | None] = []
        for item in self.sent:
            try:
                types.append(json.loads(item).get("type"))
            except (TypeError, ValueError):
                types.append(None)
        return types


__all__ = ["Address", "FakeClientWebSocket", "FakeConnector"]
