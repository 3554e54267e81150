"""Singleton instances for handler classes.

This module serves as the dedicated assembly point for instantiating
global handler singletons, kept apart from the class definitions.

Instances:
    sessions: Global SessionRegistry of active relay sessions.
"""

from .registry import SessionRegistry


sessions = SessionRegistry()


__all__ = ["sessions"]
