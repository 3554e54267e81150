"""MetricInstruments registry: typed accessors for all OTel instruments."""

from __future__ import annotations

import logging
from opentelemetry import metrics
from ..config.telemetry import (
    OTEL_SERVICE_NAME,
    METRIC_ACTIVE_SESSIONS,
    METRIC_SESSION_DURATION,
    METRIC_IDLE_TIMEOUTS_TOTAL,
    METRIC_UPSTREAM_ERRORS_TOTAL,
    METRIC_SESSIONS_REJECTED_TOTAL,
    METRIC_MESSAGES_FORWARDED_TOTAL,
    METRIC_RECONNECT_ATTEMPTS_TOTAL,
)

logger = logging.getLogger(__name__)


def _histogram(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Histogram:
    name, unit, desc = spec
    return meter.create_histogram(name, unit=unit, description=desc)


def _counter(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Counter:
    name, unit, desc = spec
    return meter.create_counter(name, unit=unit, description=desc)


def _updown(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.UpDownCounter:
    name, unit, desc = spec
    return meter.create_up_down_counter(name, unit=unit, description=desc)


class MetricInstruments:
    """Holds all OTel metric instruments created from config specs."""

    __slots__ = (
        "session_duration",
        "messages_forwarded_total",
        "upstream_errors_total",
        "reconnect_attempts_total",
        "idle_timeouts_total",
        "sessions_rejected_total",
        "active_sessions",
    )

    def __init__(self, meter: metrics.Meter) -> None:
        self.session_duration = _histogram(meter, METRIC_SESSION_DURATION)
        self.messages_forwarded_total = _counter(meter, METRIC_MESSAGES_FORWARDED_TOTAL)
        self.upstream_errors_total = _counter(meter, METRIC_UPSTREAM_ERRORS_TOTAL)
        self.reconnect_attempts_total = _counter(meter, METRIC_RECONNECT_ATTEMPTS_TOTAL)
        self.idle_timeouts_total = _counter(meter, METRIC_IDLE_TIMEOUTS_TOTAL)
        self.sessions_rejected_total = _counter(meter, METRIC_SESSIONS_REJECTED_TOTAL)
        self.active_sessions = _updown(meter, METRIC_ACTIVE_SESSIONS)


_metrics: MetricInstruments | None = None


def get_metrics() -> MetricInstruments:
    """Return the global MetricInstruments (no-op meter if OTel not initialized)."""
    global _metrics  # noqa: PLW0603
    if _metrics is None:
        meter = metrics.get_meter(OTEL_SERVICE_NAME)
        _metrics = MetricInstruments(meter)
    return _metrics


def initialize_metrics() -> None:
    """Create MetricInstruments from the global meter."""
    global _metrics  # noqa: PLW0603
    meter = metrics.get_meter(OTEL_SERVICE_NAME)
    _metrics = MetricInstruments(meter)
    logger.info("Telemetry metrics initialized")


__all__ = ["MetricInstruments", "get_metrics", "initialize_metrics"]
