from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    AUTH_UNAVAILABLE = "AUTH_UNAVAILABLE"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    CONTENT_FILTERED = "CONTENT_FILTERED"
    NETWORK_UNAVAILABLE = "NETWORK_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    PERMANENT_CLIENT_ERROR = "PERMANENT_CLIENT_ERROR"
    UNKNOWN_SERVER_ERROR = "UNKNOWN_SERVER_ERROR"

    @property
    def status_code(self) -> int:
        return CATEGORY_STATUS_CODES[self]


CATEGORY_STATUS_CODES: dict[ErrorCategory, int] = {
    ErrorCategory.AUTH_UNAVAILABLE: 503,
    ErrorCategory.QUOTA_EXCEEDED: 503,
    ErrorCategory.CONTENT_FILTERED: 400,
    ErrorCategory.NETWORK_UNAVAILABLE: 503,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.PERMANENT_CLIENT_ERROR: 400,
    ErrorCategory.UNKNOWN_SERVER_ERROR: 500,
}


class ProxyError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        self.message = message or self.message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidRequestError(ProxyError):
    status_code = 400
    error_code = "INVALID_REQUEST"
    message = "Invalid request"


class InvalidActionError(InvalidRequestError):
    error_code = "INVALID_ACTION"
    message = "Unknown action"


class ImageTooLargeError(ProxyError):
    status_code = 413
    error_code = "IMAGE_TOO_LARGE"
    message = "Image exceeds size limit"


class AuthenticationError(ProxyError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    message = "Authentication required"


class RateLimitError(ProxyError):
    status_code = 429
    error_code = "RATE_LIMIT"
    message = "Rate limit exceeded"

    def __init__(self, message: str | None = None, retry_after: int | None = None, **kwargs):
        super().__init__(message=message, **kwargs)
        self.retry_after = retry_after


class ApiError(ProxyError):
    """A terminal upstream failure mapped onto a caller-facing category."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.category = category
        self.error_code = category.value
        super().__init__(message=message, details=details, status_code=category.status_code)


class UpstreamError(Exception):
    """Raw failure reported by the Gemini API or the transport beneath it.

    Deliberately not a ProxyError: it has not been classified yet.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.retry_after = retry_after
