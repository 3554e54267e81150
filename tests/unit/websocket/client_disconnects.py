"""Unit tests for client disconnect classification and safe sends."""

from __future__ import annotations

import asyncio

from fastapi import WebSocketDisconnect
from fastapi.websockets import WebSocketState
from websockets.exceptions import ConnectionClosedOK

from tests.helpers.fakes import FakeClientWebSocket
from realtime_proxy.handlers.websocket.disconnects import is_expected_disconnect
from realtime_proxy.handlers.websocket.helpers import (
    close_client,
    client_label,
    safe_send_json,
    safe_send_payload,
    client_is_connected,
)


def test_is_expected_disconnect_for_transport_errors() -> None:
    assert is_expected_disconnect(WebSocketDisconnect(code=1000))
    assert is_expected_disconnect(ConnectionClosedOK(None, None))
    assert is_expected_disconnect(ConnectionResetError("peer reset"))
    assert is_expected_disconnect(BrokenPipeError())


def test_is_expected_disconnect_for_send_after_close() -> None:
    err = RuntimeError('Cannot call "send" once a close message has been sent.')
    assert is_expected_disconnect(err)
    assert not is_expected_disconnect(RuntimeError("boom"))
    assert not is_expected_disconnect(ValueError("bad"))


class _ResetOnSend(FakeClientWebSocket):
    async def send_text(self, data: str) -> None:
        raise ConnectionResetError("peer reset")


def test_safe_send_reports_gone_client() -> None:
    async def _run() -> None:
        ws = _ResetOnSend()
        assert not await safe_send_json(ws, {"type": "x"})

        gone = FakeClientWebSocket()
        gone.go_away()
        assert not await safe_send_payload(gone, "x")
        assert gone.sent == []

    asyncio.run(_run())


def test_safe_send_keeps_frame_kind() -> None:
    async def _run() -> None:
        ws = FakeClientWebSocket()
        assert await safe_send_payload(ws, "text")
        assert await safe_send_payload(ws, bytearray(b"\x01"))
        assert ws.sent == ["text", b"\x01"]

    asyncio.run(_run())


def test_close_client_only_once() -> None:
    async def _run() -> None:
        ws = FakeClientWebSocket()
        await close_client(ws, 4000, "idle_timeout")
        await close_client(ws, 1000, "client_closed")
        assert ws.close_calls == [(4000, "idle_timeout")]
        assert not client_is_connected(ws)

    asyncio.run(_run())


def test_client_label() -> None:
    ws = FakeClientWebSocket()
    assert client_label(ws) == "127.0.0.1:50000"
    ws.client = None
    assert client_label(ws) == "-"
    ws.application_state = WebSocketState.DISCONNECTED
    assert not client_is_connected(ws)


def test_connection_state_comes_from_fastapi() -> None:
    from fastapi import websockets as fastapi_websockets
    from realtime_proxy.handlers.websocket import helpers

    assert helpers.WebSocketState is fastapi_websockets.WebSocketState
