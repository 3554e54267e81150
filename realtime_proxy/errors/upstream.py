"""Upstream connection exceptions.

Each subclass carries a fixed, user-safe ``client_message`` and the
``client_code`` sent to the client in ``{"type": "error"}`` frames. The raw
transport error text is kept in ``detail`` for logs only.
"""

from __future__ import annotations

from ..config.session import ERROR_CODE_PROXY, ERROR_CODE_QWEN, ERROR_CODE_NOT_READY


class UpstreamError(Exception):
    """Base class for failures reported by the upstream connector.

    Attributes:
        kind: Short label used in logs and metrics.
        client_code: Error code forwarded to the client.
        client_message: Sanitized text forwarded to the client.
        detail: Raw transport error text (never sent to the client).
        status_code: HTTP status of a rejected handshake, if any.
    """

    kind = "generic"
    client_code = ERROR_CODE_PROXY
    client_message = "Realtime API connection error"

    def __init__(self, detail: str = "", *, status_code: int | None = None) -> None:
        super().__init__(detail or self.client_message)
        self.detail = detail
        self.status_code = status_code


class UpstreamUnauthorizedError(UpstreamError):
    """The realtime API rejected the credential."""

    kind = "unauthorized"
    client_code = ERROR_CODE_QWEN
    client_message = "Realtime API rejected the proxy credentials (unauthorized)"


class UpstreamForbiddenError(UpstreamError):
    """The credential is valid but not allowed to use the model."""

    kind = "forbidden"
    client_code = ERROR_CODE_QWEN
    client_message = "Realtime API denied access to the requested model (forbidden)"


class UpstreamTimeoutError(UpstreamError):
    """The handshake or a transport operation timed out."""

    kind = "timeout"
    client_message = "Timed out connecting to the realtime API"


class UpstreamGenericError(UpstreamError):
    """Any other transport failure."""

    kind = "generic"


class UpstreamUnexpectedCloseError(UpstreamError):
    """The upstream closed while the client was still connected."""

    kind = "unexpected_close"
    client_message = "Realtime API closed the connection unexpectedly"


class UpstreamNotReadyError(UpstreamError):
    """Raised when sending on a connector that is not open."""

    kind = "not_ready"
    client_code = ERROR_CODE_NOT_READY
    client_message = "Realtime API connection is not ready"


__all__ = [
    "UpstreamError",
    "UpstreamUnauthorizedError",
    "UpstreamForbiddenError",
    "UpstreamTimeoutError",
    "UpstreamGenericError",
    "UpstreamUnexpectedCloseError",
    "UpstreamNotReadyError",
]
