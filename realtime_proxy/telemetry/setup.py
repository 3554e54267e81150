"""Telemetry lifecycle for the server process.

Both backends are optional: OTel metrics need ``OTEL_EXPORTER_ENDPOINT`` and
Sentry needs ``SENTRY_DSN``. Without them the metric instruments stay bound
to the API's no-op meter and error capture returns immediately.
"""

from __future__ import annotations

import logging
from .otel import init_otel, shutdown_otel
from .instruments import initialize_metrics
from .sentry import init_sentry, shutdown_sentry
from ..config.telemetry import SENTRY_DSN, OTEL_EXPORTER_ENDPOINT

logger = logging.getLogger(__name__)


def init_telemetry() -> list[str]:
    """Activate the configured backends and return their names."""
    active: list[str] = []
    if OTEL_EXPORTER_ENDPOINT:
        init_otel()
        initialize_metrics()
        active.append("otel")
    if SENTRY_DSN:
        init_sentry()
        active.append("sentry")
    logger.info("telemetry backends: %s", ", ".join(active) or "none")
    return active


def shutdown_telemetry() -> None:
    """Flush pending events and metrics. Safe to call more than once."""
    shutdown_sentry()
    shutdown_otel()


__all__ = ["init_telemetry", "shutdown_telemetry"]
