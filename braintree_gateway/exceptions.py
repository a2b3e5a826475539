"""Exceptions raised by the gateway client.

Every error derives from GatewayError so callers can catch the whole family.
Unexpected HTTP statuses map to StatusCodeError subclasses through
raise_for_status_code(); transport failures that never produced a status
(timeouts, TLS failures, connection errors) have their own kinds and are
never reported as StatusCodeError.
"""

from __future__ import annotations

from typing import NoReturn


class GatewayError(Exception):
    """Base class for gateway client errors."""


class ConfigurationError(GatewayError):
    """Raised when configuration is invalid or cannot be loaded."""


# =============================================================================
# Status code errors
# =============================================================================


class StatusCodeError(GatewayError):
    """Raised when the gateway answers with a status the caller cannot handle."""

    def __init__(self, code: int, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or f"Unexpected HTTP status {code}")


class AuthenticationError(StatusCodeError):
    """401: credentials were rejected."""


class AuthorizationError(StatusCodeError):
    """403: credentials lack permission for the operation."""


class NotFoundError(StatusCodeError):
    """404: the requested resource does not exist."""


class UpgradeRequiredError(StatusCodeError):
    """426: this library version is no longer supported by the gateway."""


class TooManyRequestsError(StatusCodeError):
    """429: the gateway is throttling this merchant."""


class ServerError(StatusCodeError):
    """500: the gateway failed while processing the request."""


class DownForMaintenanceError(StatusCodeError):
    """503: the gateway is down for maintenance."""


class UnexpectedError(StatusCodeError):
    """Any other status not handled by the calling operation."""


_STATUS_ERRORS: dict[int, type[StatusCodeError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    426: UpgradeRequiredError,
    429: TooManyRequestsError,
    500: ServerError,
    503: DownForMaintenanceError,
}


def raise_for_status_code(code: int) -> NoReturn:
    """Raise the StatusCodeError subclass matching *code*."""
    error_class = _STATUS_ERRORS.get(code, UnexpectedError)
    raise error_class(code)


# =============================================================================
# Transport errors (no HTTP status obtained)
# =============================================================================


class RequestTimeoutError(GatewayError):
    """Raised when the request timed out before any status was received."""


class RequestError(GatewayError):
    """Raised when the connection failed for a reason other than TLS or timeout."""


class SSLCertificateError(GatewayError):
    """Raised when the TLS handshake or verification context fails."""


class SSLCaFileNotFoundError(GatewayError):
    """Raised when the CA bundle cannot be staged for the TLS library."""


class ResponseDecodeError(GatewayError):
    """Raised when a response body is not well-formed gateway XML."""
