"""Unit tests for the process-wide session registry."""

from __future__ import annotations

import asyncio

from tests.helpers.fakes import FakeConnector, FakeClientWebSocket
from realtime_proxy.handlers.registry import SessionRegistry
from realtime_proxy.handlers.session import RelaySession


def _session() -> RelaySession:
    return RelaySession(FakeClientWebSocket(), connector=FakeConnector(), check_interval_s=3600, idle_timeout_s=3600)


def test_capacity_limit() -> None:
    async def _run() -> None:
        registry = SessionRegistry(max_sessions=2)
        assert await registry.add(_session())
        assert await registry.add(_session())
        assert not await registry.add(_session())
        info = registry.get_capacity_info()
        assert info == {"active": 2, "max": 2, "at_capacity": True}

    asyncio.run(_run())


def test_unlimited_when_zero() -> None:
    async def _run() -> None:
        registry = SessionRegistry(max_sessions=0)
        for _ in range(5):
            assert await registry.add(_session())
        assert registry.get_capacity_info()["max"] is None
        assert not registry.get_capacity_info()["at_capacity"]

    asyncio.run(_run())


def test_sweep_reaps_gone_clients() -> None:
    async def _run() -> None:
        registry = SessionRegistry()
        alive, gone, finished = _session(), _session(), _session()
        for session in (alive, gone, finished):
            await registry.add(session)
        gone.client.go_away()
        await finished.terminate()

        assert await registry.sweep() == 2
        assert registry.snapshot() == [alive]
        assert gone.is_terminated
        assert gone.close_reason == "client_unresponsive"
        assert not alive.is_terminated

    asyncio.run(_run())


def test_sweeper_task_runs_periodically() -> None:
    async def _run() -> None:
        registry = SessionRegistry(sweep_interval_s=0.01)
        session = _session()
        await registry.add(session)
        session.client.go_away()

        registry.start_sweeper()
        await asyncio.sleep(0.05)
        await registry.stop_sweeper()
        assert registry.count() == 0

    asyncio.run(_run())


def test_close_all_uses_going_away() -> None:
    async def _run() -> None:
        registry = SessionRegistry()
        sessions = [_session(), _session()]
        for session in sessions:
            await registry.add(session)

        assert await registry.close_all() == 2
        assert registry.count() == 0
        for session in sessions:
            assert session.client.close_calls == [(1001, "server_shutdown")]
            assert session.connector.close_calls == [(1000, "server_shutdown")]

    asyncio.run(_run())
