"""Custom exception hierarchy for pystorefront."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Normalized error categories for backend failures."""

    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class StorefrontError(Exception):
    """Base exception for all pystorefront errors."""

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR


class StorefrontConfigError(StorefrontError):
    """Invalid or missing configuration."""


class StorefrontTransportError(StorefrontError):
    """HTTP-level failure (network, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class StorefrontConnectionError(StorefrontTransportError):
    """The backend could not be reached."""

    code = ErrorCode.CONNECTION_ERROR


class StorefrontApiError(StorefrontError):
    """Backend answered with a non-2xx status.

    ``data`` carries the backend's per-field validation details when it
    sends them.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
        data: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.data = data or {}
        super().__init__(message)


class StorefrontValidationError(StorefrontApiError):
    """Request rejected as invalid (HTTP 400) or failed local validation."""

    code = ErrorCode.VALIDATION_ERROR


class StorefrontAuthenticationError(StorefrontApiError):
    """Missing or rejected credentials (HTTP 401)."""

    code = ErrorCode.UNAUTHORIZED


class StorefrontForbiddenError(StorefrontApiError):
    """Authenticated but not allowed (HTTP 403)."""

    code = ErrorCode.FORBIDDEN


class StorefrontNotFoundError(StorefrontApiError):
    """Record does not exist or is hidden by access rules (HTTP 404)."""

    code = ErrorCode.NOT_FOUND


class StorefrontDuplicateError(StorefrontApiError):
    """Unique constraint violated (HTTP 409)."""

    code = ErrorCode.DUPLICATE_ENTRY


class StorefrontRateLimitError(StorefrontApiError):
    """Backend throttled the request (HTTP 429)."""

    code = ErrorCode.RATE_LIMITED


class StorefrontNotAuthenticatedError(StorefrontError):
    """Operation needs a signed-in user but none is present."""

    code = ErrorCode.UNAUTHORIZED


class StorefrontOrderStateError(StorefrontError):
    """Order cannot move to the requested state (e.g. cancelling a shipped order)."""

    code = ErrorCode.VALIDATION_ERROR


class StorefrontDiscountError(StorefrontError):
    """Discount code is unknown, inactive, expired, exhausted, or below its minimum."""

    code = ErrorCode.VALIDATION_ERROR


_STATUS_ERRORS: dict[int, type[StorefrontApiError]] = {
    400: StorefrontValidationError,
    401: StorefrontAuthenticationError,
    403: StorefrontForbiddenError,
    404: StorefrontNotFoundError,
    409: StorefrontDuplicateError,
    429: StorefrontRateLimitError,
}

_DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Validation failed",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    409: "Duplicate entry",
    429: "Too many requests",
}


def error_for_status(
    status_code: int,
    message: str = "",
    *,
    endpoint: str = "",
    data: dict[str, Any] | None = None,
) -> StorefrontApiError:
    """Build the exception matching an HTTP status returned by the backend."""
    cls = _STATUS_ERRORS.get(status_code, StorefrontApiError)
    text = message or _DEFAULT_STATUS_MESSAGES.get(status_code, "An error occurred")
    return cls(text, status_code=status_code, endpoint=endpoint, data=data)


_FRIENDLY_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.NOT_FOUND: "The requested item could not be found.",
    ErrorCode.UNAUTHORIZED: "Please sign in to continue.",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorCode.VALIDATION_ERROR: "Please check your input and try again.",
    ErrorCode.DUPLICATE_ENTRY: "This item already exists.",
    ErrorCode.CONNECTION_ERROR: "Unable to connect. Please check your internet connection.",
    ErrorCode.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
}


def user_friendly_message(error: BaseException) -> str:
    """Return a message suitable for showing to a shopper."""
    code = error.code if isinstance(error, StorefrontError) else ErrorCode.UNKNOWN_ERROR
    return _FRIENDLY_MESSAGES.get(code, "Something went wrong. Please try again.")
