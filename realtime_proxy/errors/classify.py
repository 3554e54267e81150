"""Structured classification of upstream transport failures.

Detection (status codes, exception types, message substrings) lives here so
the presentation text in :mod:`.upstream` never depends on it.
"""

from __future__ import annotations

import asyncio

from .client import ClientProtocolError
from .timeout import InactivityTimeoutError
from .upstream import (
    UpstreamError,
    UpstreamGenericError,
    UpstreamTimeoutError,
    UpstreamForbiddenError,
    UpstreamUnauthorizedError,
)

_STATUS_KINDS: dict[int, type[UpstreamError]] = {
    401: UpstreamUnauthorizedError,
    403: UpstreamForbiddenError,
    408: UpstreamTimeoutError,
    504: UpstreamTimeoutError,
}

_SUBSTRING_KINDS: tuple[tuple[tuple[str, ...], type[UpstreamError]], ...] = (
    (("unauthorized", "401", "invalid api-key", "invalid api key"), UpstreamUnauthorizedError),
    (("forbidden", "403", "access denied"), UpstreamForbiddenError),
    (("timeout", "timed out"), UpstreamTimeoutError),
)

ERROR_CATEGORIES: tuple[tuple[type[BaseException], str], ...] = (
    (UpstreamError, "upstream"),
    (ClientProtocolError, "client_protocol"),
    (InactivityTimeoutError, "inactivity"),
    (TimeoutError, "timeout"),
    (ConnectionError, "connection"),
)


def _status_code(exc: BaseException) -> int | None:
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(exc, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def redact(text: str, secret: str | None) -> str:
    """Replace every occurrence of ``secret`` in ``text``."""
    if not secret or not text:
        return text
    return text.replace(secret, "***")


def classify_upstream_error(exc: BaseException, *, secret: str | None = None) -> UpstreamError:
    """Map a transport exception to a typed :class:`UpstreamError`.

    Already-classified errors are returned unchanged. ``secret`` is scrubbed
    from the retained detail text.
    """
    if isinstance(exc, UpstreamError):
        return exc

    detail = redact(str(exc) or type(exc).__name__, secret)
    status = _status_code(exc)
    if status in _STATUS_KINDS:
        return _STATUS_KINDS[status](detail, status_code=status)

    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return UpstreamTimeoutError(detail, status_code=status)

    lowered = detail.lower()
    for fragments, kind in _SUBSTRING_KINDS:
        if any(fragment in lowered for fragment in fragments):
            return kind(detail, status_code=status)
    return UpstreamGenericError(detail, status_code=status)


def classify_error(exc: BaseException) -> str:
    """Map an exception to a metric-friendly category label."""

    if isinstance(exc, UpstreamError):
        return f"upstream_{exc.kind}"
    for cls, label in ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "unknown"


__all__ = ["ERROR_CATEGORIES", "classify_upstream_error", "classify_error", "redact"]
