"""Unit tests for the pending client-frame buffer."""

from __future__ import annotations

import asyncio

from realtime_proxy.errors import UpstreamNotReadyError
from realtime_proxy.handlers.session.buffer import PendingMessageBuffer


def test_drain_preserves_arrival_order() -> None:
    async def _run() -> None:
        buffer = PendingMessageBuffer()
        for payload in ("a", b"b", "c"):
            buffer.enqueue(payload)
        sent: list[str | bytes] = []

        async def _send(payload: str | bytes) -> None:
            sent.append(payload)

        assert await buffer.drain_into(_send) == 3
        assert sent == ["a", b"b", "c"]
        assert len(buffer) == 0

    asyncio.run(_run())


def test_failed_send_keeps_frame_at_head() -> None:
    async def _run() -> None:
        buffer = PendingMessageBuffer()
        for payload in ("first", "second", "third"):
            buffer.enqueue(payload)
        sent: list[str | bytes] = []

        async def _send(payload: str | bytes) -> None:
            if payload == "second":
                raise UpstreamNotReadyError("link dropped")
            sent.append(payload)

        assert await buffer.drain_into(_send) == 1
        assert sent == ["first"]
        assert buffer.snapshot() == ["second", "third"]
        assert buffer.peek() == "second"

    asyncio.run(_run())


def test_drain_stops_when_link_unavailable() -> None:
    async def _run() -> None:
        buffer = PendingMessageBuffer()
        buffer.enqueue("x")
        sent: list[str | bytes] = []

        async def _send(payload: str | bytes) -> None:
            sent.append(payload)

        assert await buffer.drain_into(_send, is_available=lambda: False) == 0
        assert sent == []
        assert len(buffer) == 1

    asyncio.run(_run())


def test_frames_enqueued_during_drain_follow_earlier_frames() -> None:
    async def _run() -> None:
        buffer = PendingMessageBuffer()
        buffer.enqueue("1")
        buffer.enqueue("2")
        sent: list[str | bytes] = []

        async def _send(payload: str | bytes) -> None:
            if payload == "1":
                buffer.enqueue("3")
            sent.append(payload)

        await buffer.drain_into(_send)
        assert sent == ["1", "2", "3"]

    asyncio.run(_run())


def test_clear_reports_dropped_count() -> None:
    buffer = PendingMessageBuffer()
    assert buffer.enqueue("a") == 1
    assert buffer.enqueue("b") == 2
    assert buffer.clear() == 2
    assert buffer.peek() is None
