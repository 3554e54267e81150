"""Sentry error reporting for relay sessions.

Events are throttled per error category (see :func:`classify_error`), so a
realtime API outage produces one ``upstream_unauthorized`` event every
``SENTRY_RATE_LIMIT_S`` rather than one per connected client. The upstream
credential is scrubbed from every outgoing event.
"""

from __future__ import annotations

import time
import logging
from typing import Any
from ..logging import current_log_context
from ..errors.classify import redact, classify_error
from ..config.upstream import QWEN_API_KEY
from ..config.telemetry import (
    SENTRY_DSN,
    SENTRY_RELEASE,
    SENTRY_ENVIRONMENT,
    SENTRY_SAMPLE_RATE,
    SENTRY_RATE_LIMIT_S,
    SENTRY_TAG_CLIENT_ID,
    SENTRY_TAG_SESSION_ID,
    SENTRY_TAG_ERROR_CATEGORY,
    SENTRY_BREADCRUMB_CATEGORY,
)

logger = logging.getLogger(__name__)

_last_sent: dict[str, float] = {}
_initialized: bool = False


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return redact(value, QWEN_API_KEY)
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(v) for v in value]
    return value


def _before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    return _scrub(event)


def init_sentry() -> None:
    """Initialize Sentry SDK. Idempotent."""
    global _initialized  # noqa: PLW0603
    if _initialized:
        return
    import sentry_sdk

    options: dict[str, Any] = {
        "dsn": SENTRY_DSN,
        "environment": SENTRY_ENVIRONMENT,
        "sample_rate": SENTRY_SAMPLE_RATE,
        "traces_sample_rate": 0.0,
        "send_default_pii": False,
        "before_send": _before_send,
    }
    if SENTRY_RELEASE:
        options["release"] = SENTRY_RELEASE

    sentry_sdk.init(**options)
    _initialized = True
    logger.info("Sentry initialized: environment=%s", SENTRY_ENVIRONMENT)


def shutdown_sentry() -> None:
    global _initialized  # noqa: PLW0603
    if not _initialized:
        return
    import sentry_sdk

    try:
        sentry_sdk.flush(timeout=2.0)
    except Exception:  # noqa: BLE001
        logger.debug("Sentry flush failed", exc_info=True)
    _initialized = False


def _throttled(category: str) -> bool:
    now = time.monotonic()
    if now - _last_sent.get(category, float("-inf")) < SENTRY_RATE_LIMIT_S:
        return True
    _last_sent[category] = now
    return False


def capture_error(
    error: BaseException,
    *,
    session_id: str | None = None,
    client_id: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Report a relay failure, at most once per category per rate window."""
    if not _initialized:
        return
    category = classify_error(error)
    if _throttled(category):
        return

    import sentry_sdk

    context = current_log_context()
    with sentry_sdk.new_scope() as scope:
        scope.set_tag(SENTRY_TAG_SESSION_ID, session_id or context["session_id"])
        scope.set_tag(SENTRY_TAG_CLIENT_ID, client_id or context["client_id"])
        scope.set_tag("model", context["model"])
        scope.set_tag(SENTRY_TAG_ERROR_CATEGORY, category)
        for key, value in (extra or {}).items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(error)


def add_breadcrumb(message: str, **data: Any) -> None:
    """Record a relay lifecycle step; attached to the next captured error."""
    if not _initialized:
        return
    import sentry_sdk

    sentry_sdk.add_breadcrumb(message=message, category=SENTRY_BREADCRUMB_CATEGORY, level="info", data=data)


__all__ = ["init_sentry", "shutdown_sentry", "capture_error", "add_breadcrumb"]
