"""Upstream connection states."""

from __future__ import annotations

from enum import Enum


class UpstreamState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"

    @property
    def is_down(self) -> bool:
        return self in (UpstreamState.CLOSED, UpstreamState.ERRORED)


__all__ = ["UpstreamState"]
