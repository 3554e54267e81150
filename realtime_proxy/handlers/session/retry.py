"""Bounded reconnect policy consulted by the liveness monitor."""

from __future__ import annotations

from dataclasses import dataclass

from ...config.websocket import RELAY_MAX_CONSECUTIVE_DROPS


@dataclass
class ReconnectPolicy:
    """Allows one reconnect attempt per recorded upstream drop.

    A drop that follows an attempt without an intervening successful open
    counts as consecutive. Once ``consecutive_drops`` exceeds
    ``max_consecutive_drops`` the policy is exhausted and the session must be
    torn down.
    """

    max_consecutive_drops: int = RELAY_MAX_CONSECUTIVE_DROPS
    consecutive_drops: int = 0
    attempts: int = 0
    pending: bool = False

    @property
    def exhausted(self) -> bool:
        return self.consecutive_drops > self.max_consecutive_drops

    def record_drop(self) -> int:
        self.consecutive_drops += 1
        self.pending = not self.exhausted
        return self.consecutive_drops

    def record_success(self) -> None:
        self.consecutive_drops = 0
        self.pending = False

    def allow_attempt(self) -> bool:
        return self.pending and not self.exhausted

    def mark_attempt(self) -> None:
        self.pending = False
        self.attempts += 1


__all__ = ["ReconnectPolicy"]
