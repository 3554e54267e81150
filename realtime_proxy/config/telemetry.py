"""Telemetry configuration: env vars, metric specs, Sentry constants."""

import os

# ---------------------------------------------------------------------------
# Sentry
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_RELEASE: str = os.getenv("SENTRY_RELEASE", "")
SENTRY_SAMPLE_RATE: float = float(os.getenv("SENTRY_SAMPLE_RATE", "1.0"))

# ---------------------------------------------------------------------------
# OTel metrics export
# ---------------------------------------------------------------------------
OTEL_EXPORTER_ENDPOINT: str = os.getenv("OTEL_EXPORTER_ENDPOINT", "")
OTEL_EXPORTER_TOKEN: str = os.getenv("OTEL_EXPORTER_TOKEN", "")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "qwen-realtime-proxy")
OTEL_ENVIRONMENT: str = os.getenv("OTEL_ENVIRONMENT", "production")
OTEL_METRICS_EXPORT_INTERVAL_MS: int = int(os.getenv("OTEL_METRICS_EXPORT_INTERVAL_MS", "15000"))

# ---------------------------------------------------------------------------
# Metric spec tuples: (name, unit, description)
# ---------------------------------------------------------------------------

# Histograms
METRIC_SESSION_DURATION = ("realtime_proxy.session_duration", "s", "Relay session duration")

# Counters
METRIC_MESSAGES_FORWARDED_TOTAL = (
    "realtime_proxy.messages_forwarded_total",
    "{message}",
    "Messages relayed, by direction",
)
METRIC_UPSTREAM_ERRORS_TOTAL = ("realtime_proxy.upstream_errors_total", "{error}", "Upstream errors, by kind")
METRIC_RECONNECT_ATTEMPTS_TOTAL = (
    "realtime_proxy.reconnect_attempts_total",
    "{attempt}",
    "Upstream reconnect attempts",
)
METRIC_IDLE_TIMEOUTS_TOTAL = ("realtime_proxy.idle_timeouts_total", "{session}", "Inactivity terminations")
METRIC_SESSIONS_REJECTED_TOTAL = ("realtime_proxy.sessions_rejected_total", "{session}", "Rejected at capacity")

# UpDown counters
METRIC_ACTIVE_SESSIONS = ("realtime_proxy.active_sessions", "{session}", "Current relay sessions")

# ---------------------------------------------------------------------------
# Sentry constants
# ---------------------------------------------------------------------------
SENTRY_RATE_LIMIT_S: float = 10.0
SENTRY_TAG_SESSION_ID = "session_id"
SENTRY_TAG_CLIENT_ID = "client_id"
SENTRY_TAG_ERROR_CATEGORY = "error.category"
SENTRY_BREADCRUMB_CATEGORY = "relay"


__all__ = [
    "SENTRY_DSN",
    "SENTRY_ENVIRONMENT",
    "SENTRY_RELEASE",
    "SENTRY_SAMPLE_RATE",
    "OTEL_EXPORTER_ENDPOINT",
    "OTEL_EXPORTER_TOKEN",
    "OTEL_SERVICE_NAME",
    "OTEL_ENVIRONMENT",
    "OTEL_METRICS_EXPORT_INTERVAL_MS",
    "METRIC_SESSION_DURATION",
    "METRIC_MESSAGES_FORWARDED_TOTAL",
    "METRIC_UPSTREAM_ERRORS_TOTAL",
    "METRIC_RECONNECT_ATTEMPTS_TOTAL",
    "METRIC_IDLE_TIMEOUTS_TOTAL",
    "METRIC_SESSIONS_REJECTED_TOTAL",
    "METRIC_ACTIVE_SESSIONS",
    "SENTRY_RATE_LIMIT_S",
    "SENTRY_TAG_SESSION_ID",
    "SENTRY_TAG_CLIENT_ID",
    "SENTRY_TAG_ERROR_CATEGORY",
    "SENTRY_BREADCRUMB_CATEGORY",
]
