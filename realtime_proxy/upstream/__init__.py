"""Upstream realtime API connector."""

from .state import UpstreamState
from .listener import UpstreamListener
from .connector import UpstreamConnector

__all__ = [
    "UpstreamState",
    "UpstreamListener",
    "UpstreamConnector",
]
