"""Public telemetry API: re-exports for convenience."""

from .sentry import add_breadcrumb, capture_error
from .setup import init_telemetry, shutdown_telemetry
from .instruments import get_metrics, initialize_metrics

__all__ = [
    "init_telemetry",
    "shutdown_telemetry",
    "capture_error",
    "add_breadcrumb",
    "get_metrics",
    "initialize_metrics",
]
