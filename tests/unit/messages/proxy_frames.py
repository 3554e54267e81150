"""Unit tests for proxy-originated frames."""

from __future__ import annotations

import json

from realtime_proxy.config.session import SESSION_DEFAULTS
from realtime_proxy.errors import UpstreamForbiddenError
from realtime_proxy.messages import (
    build_error,
    build_not_ready,
    build_system_info,
    build_upstream_error,
    build_session_update,
    build_proxy_connected,
    encode_session_update,
)


def test_proxy_connected_shape() -> None:
    frame = build_proxy_connected()
    assert frame["type"] == "proxy.connected"
    assert frame["message"]
    assert frame["timestamp"].endswith("Z")


def test_error_shape() -> None:
    assert build_error("PROXY_ERROR", "boom") == {
        "type": "error",
        "error": {"message": "boom", "code": "PROXY_ERROR"},
    }
    assert build_not_ready()["error"]["code"] == "NOT_READY"
    assert build_system_info("hi") == {"type": "system.info", "message": "hi"}


def test_upstream_error_uses_fixed_text() -> None:
    frame = build_upstream_error(UpstreamForbiddenError("raw transport text", status_code=403))
    assert frame["error"]["code"] == "QWEN_ERROR"
    assert "raw transport text" not in frame["error"]["message"]


def test_session_update_event_id_and_fresh_defaults() -> None:
    message = build_session_update(now_ms=lambda: 1700000000123)
    assert message["type"] == "session.update"
    assert message["event_id"] == "event_1700000000123"
    assert message["session"] == SESSION_DEFAULTS

    message["session"]["modalities"].append("video")
    assert "video" not in SESSION_DEFAULTS["modalities"]


def test_encoded_session_update_is_json() -> None:
    decoded = json.loads(encode_session_update(now_ms=lambda: 1))
    assert decoded["event_id"] == "event_1"
    assert decoded["session"]["input_audio_transcription"] == {"model": "gummy-realtime-v1"}
