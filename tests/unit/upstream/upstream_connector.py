"""Unit tests for the upstream connector against a local WebSocket server."""

from __future__ import annotations

import asyncio
from http import HTTPStatus

import pytest
from websockets.asyncio.server import serve

from realtime_proxy.errors import UpstreamError, UpstreamNotReadyError
from realtime_proxy.upstream import UpstreamState, UpstreamConnector

_KEY = "sk-local-test-key"


class _Recorder:
    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.opened = asyncio.Event()
        self.closed = asyncio.Event()
        self.message = asyncio.Event()

    async def on_upstream_open(self) -> None:
        self.events.append(("open",))
        self.opened.set()

    async def on_upstream_message(self, payload: str | bytes) -> None:
        self.events.append(("message", payload))
        self.message.set()

    async def on_upstream_error(self, err: UpstreamError) -> None:
        self.events.append(("error", err))

    async def on_upstream_close(self, code: int, reason: str) -> None:
        self.events.append(("close", code, reason))
        self.closed.set()


def _port(server) -> int:
    return server.sockets[0].getsockname()[1]


def _connector(recorder: _Recorder, port: int) -> UpstreamConnector:
    return UpstreamConnector(
        recorder,
        api_key=_KEY,
        base_url=f"ws://127.0.0.1:{port}/api-ws/v1/realtime",
        open_timeout_s=2,
        close_timeout_s=1,
    )


def test_url_and_headers() -> None:
    connector = UpstreamConnector(api_key="k", base_url="wss://example.test/realtime")
    assert connector.build_url("qwen-omni-turbo-realtime") == "wss://example.test/realtime?model=qwen-omni-turbo-realtime"
    assert connector.build_headers() == {"Authorization": "Bearer k"}

    with_query = UpstreamConnector(api_key="k", base_url="wss://example.test/realtime?region=cn")
    assert with_query.build_url("m") == "wss://example.test/realtime?region=cn&model=m"


def test_connect_requires_listener() -> None:
    async def _run() -> None:
        with pytest.raises(RuntimeError):
            await UpstreamConnector(api_key="k").connect("m")

    asyncio.run(_run())


def test_send_before_open_raises_not_ready() -> None:
    async def _run() -> None:
        connector = UpstreamConnector(_Recorder(), api_key="k")
        with pytest.raises(UpstreamNotReadyError):
            await connector.send("{}")

    asyncio.run(_run())


def test_handshake_relay_and_remote_close() -> None:
    async def _run() -> None:
        seen: dict[str, str | None] = {}

        async def handler(connection) -> None:
            seen["auth"] = connection.request.headers.get("Authorization")
            seen["agent"] = connection.request.headers.get("User-Agent")
            seen["path"] = connection.request.path
            await connection.send("hello")
            seen["echo"] = await connection.recv()
            await connection.close(1000, "done")

        async with serve(handler, "127.0.0.1", 0) as server:
            recorder = _Recorder()
            connector = _connector(recorder, _port(server))
            assert await connector.connect("qwen-omni-turbo-realtime") == 1

            await asyncio.wait_for(recorder.message.wait(), timeout=2)
            assert connector.is_open
            await connector.send('{"type": "response.create"}')
            await asyncio.wait_for(recorder.closed.wait(), timeout=2)

        assert seen["auth"] == f"Bearer {_KEY}"
        assert seen["agent"] == "QwenProxy/1.0"
        assert seen["path"] == "/api-ws/v1/realtime?model=qwen-omni-turbo-realtime"
        assert seen["echo"] == '{"type": "response.create"}'
        assert recorder.events == [("open",), ("message", "hello"), ("close", 1000, "done")]
        assert connector.state is UpstreamState.CLOSED
        assert not connector.is_open

    asyncio.run(_run())


def test_rejected_handshake_reports_unauthorized_then_close() -> None:
    async def _run() -> None:
        def reject(connection, request):
            return connection.respond(HTTPStatus.UNAUTHORIZED, "Invalid API-key provided.\n")

        async def handler(connection) -> None:
            await connection.wait_closed()

        async with serve(handler, "127.0.0.1", 0, process_request=reject) as server:
            recorder = _Recorder()
            connector = _connector(recorder, _port(server))
            await connector.connect("m")
            await asyncio.wait_for(recorder.closed.wait(), timeout=2)

        kinds = [event[0] for event in recorder.events]
        assert kinds == ["error", "close"]
        err = recorder.events[0][1]
        assert err.kind == "unauthorized"
        assert err.client_code == "QWEN_ERROR"
        assert _KEY not in err.detail
        assert recorder.events[1][1] == 1006
        assert connector.state is UpstreamState.ERRORED

    asyncio.run(_run())


def test_local_close_does_not_report_close_event() -> None:
    async def _run() -> None:
        async def handler(connection) -> None:
            await connection.wait_closed()

        async with serve(handler, "127.0.0.1", 0) as server:
            recorder = _Recorder()
            connector = _connector(recorder, _port(server))
            await connector.connect("m")
            await asyncio.wait_for(recorder.opened.wait(), timeout=2)

            await connector.close(1000, "client_closed")
            await asyncio.sleep(0.05)

        assert recorder.events == [("open",)]
        assert connector.state is UpstreamState.CLOSED

    asyncio.run(_run())


def test_reconnect_bumps_generation() -> None:
    async def _run() -> None:
        async def handler(connection) -> None:
            await connection.wait_closed()

        async with serve(handler, "127.0.0.1", 0) as server:
            recorder = _Recorder()
            connector = _connector(recorder, _port(server))
            await connector.connect("m")
            await asyncio.wait_for(recorder.opened.wait(), timeout=2)
            recorder.opened.clear()

            assert await connector.connect("m") == 2
            await asyncio.wait_for(recorder.opened.wait(), timeout=2)
            assert connector.is_open
            await connector.close()

        assert [event[0] for event in recorder.events] == ["open", "open"]

    asyncio.run(_run())


class _RaisingRecorder(_Recorder):
    async def on_upstream_message(self, payload: str | bytes) -> None:
        await super().on_upstream_message(payload)
        if payload == "bad":
            raise RuntimeError("client send failed")


async def _wait_for_event(recorder: _Recorder, event: tuple) -> None:
    while event not in recorder.events:
        await asyncio.sleep(0.01)


def test_listener_failure_keeps_connection_open() -> None:
    async def _run() -> None:
        released = asyncio.Event()

        async def handler(connection) -> None:
            await connection.send("bad")
            await connection.send("good")
            await connection.wait_closed()
            released.set()

        async with serve(handler, "127.0.0.1", 0) as server:
            recorder = _RaisingRecorder()
            connector = _connector(recorder, _port(server))
            await connector.connect("m")
            await asyncio.wait_for(_wait_for_event(recorder, ("message", "good")), timeout=2)

            assert connector.is_open
            assert connector.state is UpstreamState.OPEN
            assert [event[0] for event in recorder.events] == ["open", "message", "message"]

            await connector.connect("m")
            await asyncio.wait_for(released.wait(), timeout=2)
            await connector.close()

    asyncio.run(_run())


class _BrokenTransport:
    def __init__(self) -> None:
        self.close_code = None
        self.close_reason = None
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        raise RuntimeError("transport broke")

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = True


def test_transport_failure_closes_socket_before_reporting() -> None:
    async def _run() -> None:
        transport = _BrokenTransport()

        async def fake_connect(url: str, **kwargs):
            return transport

        recorder = _Recorder()
        connector = UpstreamConnector(recorder, api_key=_KEY, connect_fn=fake_connect)
        await connector.connect("m")
        await asyncio.wait_for(recorder.closed.wait(), timeout=2)

        assert transport.closed
        assert [event[0] for event in recorder.events] == ["open", "error", "close"]
        assert recorder.events[-1][1:] == (1006, "transport_error")
        assert not connector.is_open

    asyncio.run(_run())
