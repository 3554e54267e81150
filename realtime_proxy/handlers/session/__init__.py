"""Relay session components."""

from .state import SessionState
from .retry import ReconnectPolicy
from .relay import RelaySession
from .buffer import PendingMessageBuffer
from .liveness import LivenessMonitor
from .configurator import SessionConfigurator

__all__ = [
    "SessionState",
    "ReconnectPolicy",
    "RelaySession",
    "PendingMessageBuffer",
    "LivenessMonitor",
    "SessionConfigurator",
]
