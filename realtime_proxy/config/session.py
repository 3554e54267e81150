"""Realtime session protocol constants.

The initialization message sent to every new upstream connection has a fixed
shape; only ``event_id`` changes between sends.
"""

from __future__ import annotations

SESSION_UPDATE_TYPE = "session.update"
SESSION_UPDATED_TYPE = "session.updated"

SESSION_DEFAULTS: dict = {
    "modalities": ["text", "audio"],
    "voice": "Ethan",
    "input_audio_format": "pcm16",
    "output_audio_format": "pcm16",
    "input_audio_transcription": {"model": "gummy-realtime-v1"},
    "turn_detection": None,
}

# Proxy-originated message types
PROXY_CONNECTED_TYPE = "proxy.connected"
SYSTEM_INFO_TYPE = "system.info"
ERROR_TYPE = "error"

# Client-facing error codes
ERROR_CODE_QWEN = "QWEN_ERROR"
ERROR_CODE_NOT_READY = "NOT_READY"
ERROR_CODE_PROXY = "PROXY_ERROR"

PROXY_CONNECTED_MESSAGE = "Proxy connected to the realtime API"
UPSTREAM_LOST_MESSAGE = "Upstream connection lost; reconnecting"
UPSTREAM_RESTORED_MESSAGE = "Upstream connection restored; session reconfigured"
NOT_READY_MESSAGE = "Realtime API connection is not ready; messages are queued"

# Log previews
PAYLOAD_PREVIEW_CHARS = 100

__all__ = [
    "SESSION_UPDATE_TYPE",
    "SESSION_UPDATED_TYPE",
    "SESSION_DEFAULTS",
    "PROXY_CONNECTED_TYPE",
    "SYSTEM_INFO_TYPE",
    "ERROR_TYPE",
    "ERROR_CODE_QWEN",
    "ERROR_CODE_NOT_READY",
    "ERROR_CODE_PROXY",
    "PROXY_CONNECTED_MESSAGE",
    "UPSTREAM_LOST_MESSAGE",
    "UPSTREAM_RESTORED_MESSAGE",
    "NOT_READY_MESSAGE",
    "PAYLOAD_PREVIEW_CHARS",
]
