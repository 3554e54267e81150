"""Relay session states."""

from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    ERRORED = "errored"
    CLOSING = "closing"
    TERMINATED = "terminated"


__all__ = ["SessionState"]
