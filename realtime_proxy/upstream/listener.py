"""Callback interface the connector reports its events to."""

from __future__ import annotations

from typing import Protocol

from ..errors import UpstreamError


class UpstreamListener(Protocol):
    async def on_upstream_open(self) -> None: ...

    async def on_upstream_message(self, payload: str | bytes) -> None: ...

    async def on_upstream_error(self, err: UpstreamError) -> None: ...

    async def on_upstream_close(self, code: int, reason: str) -> None: ...


__all__ = ["UpstreamListener"]
