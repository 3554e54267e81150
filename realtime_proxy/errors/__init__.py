"""Centralized exception classes for the relay.

Organization:
    - upstream.py: Upstream connector failures with client-facing codes
    - client.py: Unparseable client payloads
    - timeout.py: Session inactivity
    - classify.py: Transport-exception and telemetry-label classification
"""

from .client import ClientProtocolError
from .timeout import InactivityTimeoutError
from .classify import classify_error, classify_upstream_error, redact
from .upstream import (
    UpstreamError,
    UpstreamGenericError,
    UpstreamTimeoutError,
    UpstreamNotReadyError,
    UpstreamForbiddenError,
    UpstreamUnauthorizedError,
    UpstreamUnexpectedCloseError,
)

__all__ = [
    # Upstream errors
    "UpstreamError",
    "UpstreamUnauthorizedError",
    "UpstreamForbiddenError",
    "UpstreamTimeoutError",
    "UpstreamGenericError",
    "UpstreamUnexpectedCloseError",
    "UpstreamNotReadyError",
    # Client errors
    "ClientProtocolError",
    # Session errors
    "InactivityTimeoutError",
    # Classification
    "classify_upstream_error",
    "classify_error",
    "redact",
]
