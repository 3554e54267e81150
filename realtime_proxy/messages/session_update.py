"""Builder for the one-time upstream ``session.update`` message."""

from __future__ import annotations

import copy
import json
import time
from typing import Any
from collections.abc import Callable

from ..config.session import SESSION_DEFAULTS, SESSION_UPDATE_TYPE


def build_session_update(now_ms: Callable[[], int] | None = None) -> dict[str, Any]:
    """Return a fresh initialization message with a timestamped ``event_id``."""
    clock = now_ms or (lambda: int(time.time() * 1000))
    return {
        "type": SESSION_UPDATE_TYPE,
        "event_id": f"event_{clock()}",
        "session": copy.deepcopy(SESSION_DEFAULTS),
    }


def encode_session_update(now_ms: Callable[[], int] | None = None) -> str:
    return json.dumps(build_session_update(now_ms))


__all__ = ["build_session_update", "encode_session_update"]
