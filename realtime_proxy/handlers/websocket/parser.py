"""Lifecycle-marker detection on relayed frames.

Frames are never rewritten. The relay only needs to spot ``session.update``
going upstream and ``session.updated`` coming back, so a frame is parsed only
when one of the requested marker strings appears in it.
"""

from __future__ import annotations

import json
import logging

from ...errors import ClientProtocolError

logger = logging.getLogger(__name__)


def parse_message_type(payload: str | bytes) -> str | None:
    """Return the ``type`` field of a JSON-object frame.

    Raises:
        ClientProtocolError: The frame is not a UTF-8 JSON object.
    """
    try:
        text = payload.decode("utf-8") if isinstance(payload, (bytes, bytearray)) else payload
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ClientProtocolError(f"frame is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ClientProtocolError("frame must be a JSON object")
    msg_type = data.get("type")
    return msg_type if isinstance(msg_type, str) else None


def _contains_marker(payload: str | bytes, markers: tuple[str, ...]) -> bool:
    if isinstance(payload, (bytes, bytearray)):
        return any(marker.encode("utf-8") in payload for marker in markers)
    return any(marker in payload for marker in markers)


def peek_message_type(payload: str | bytes, markers: tuple[str, ...], *, source: str) -> str | None:
    """Return the frame's type when it may be one of ``markers``.

    Frames that mention none of the markers are not parsed. Parse failures
    are logged and reported as ``None``; the caller forwards the frame anyway.
    """
    if not _contains_marker(payload, markers):
        return None
    try:
        return parse_message_type(payload)
    except ClientProtocolError as exc:
        logger.debug("%s frame could not be parsed; forwarding raw: %s", source, exc)
        return None


def preview(payload: str | bytes, limit: int) -> str:
    """Short printable prefix of a frame for debug logs."""
    if isinstance(payload, (bytes, bytearray)):
        return f"<{len(payload)} bytes>"
    return payload[:limit] + ("..." if len(payload) > limit else "")


__all__ = ["parse_message_type", "peek_message_type", "preview"]
