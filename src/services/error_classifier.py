"""Maps raw upstream failures onto the caller-facing error taxonomy.

Rules are evaluated in a fixed order and the first match wins:

1. authentication / credential problems  -> AUTH_UNAVAILABLE (503)
2. quota or rate limiting                -> QUOTA_EXCEEDED (503)
3. content filtering                     -> CONTENT_FILTERED (400)
4. network reachability                  -> NETWORK_UNAVAILABLE (503)
5. timeouts                              -> TIMEOUT (504)
6. permanent upstream rejection          -> PERMANENT_CLIENT_ERROR (400)
7. anything else                         -> UNKNOWN_SERVER_ERROR (500)

Security-relevant rules come first so that a failure matching several rules
reveals as little as possible. Message checks are plain case-insensitive
substring matches because upstream SDKs rarely expose structured error
types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from src.models.errors import ApiError, ErrorCategory
from src.services.failure_signals import error_code, error_message, error_status


class OperationContext(str, Enum):
    IDENTIFY_PHRASE = "identify phrase"
    IDENTIFY_PHRASES = "identify phrases"
    ANALYZE = "analyze"


AUTH_MESSAGE_MARKERS = ("api key", "invalid_argument", "unauthenticated", "permission_denied")
QUOTA_MESSAGE_MARKERS = ("quota", "rate limit", "resource_exhausted")
NETWORK_CODES = frozenset({"ECONNREFUSED", "ENOTFOUND", "EAI_AGAIN"})
TIMEOUT_CODES = frozenset({"ETIMEDOUT"})
TIMEOUT_MESSAGE_MARKERS = ("timeout", "timed out")
PERMANENT_STATUS_CODES = frozenset({400, 403, 404})

AUTH_MESSAGE = "Service temporarily unavailable. Please contact support."
QUOTA_MESSAGE = "Service temporarily unavailable due to high demand. Please try again later."
CONTENT_FILTERED_MESSAGE = "Unable to process this content. Please try different text."
NETWORK_MESSAGE = "Unable to connect to analysis service. Please try again."
PERMANENT_MESSAGE = "Unable to process this request. Please check the input and try again."

TIMEOUT_MESSAGES = {
    OperationContext.IDENTIFY_PHRASE: "Request timed out. Please try again with a smaller image or selection.",
    OperationContext.IDENTIFY_PHRASES: "Request timed out. Please try again with a smaller image or fewer phrases.",
    OperationContext.ANALYZE: "Request timed out. Please try again.",
}

GENERIC_MESSAGES = {
    OperationContext.IDENTIFY_PHRASE: "Failed to identify phrase from screenshot",
    OperationContext.IDENTIFY_PHRASES: "Failed to identify phrases from screenshot",
    OperationContext.ANALYZE: "Failed to analyze phrase",
}


@dataclass(frozen=True)
class ClassifiedError:
    category: ErrorCategory
    is_retryable: bool
    status_code: int
    user_message: str
    internal_detail: dict[str, Any] | None = None

    def to_api_error(self) -> ApiError:
        return ApiError(self.category, self.user_message, details=self.internal_detail)


def _classified(category: ErrorCategory, message: str, detail: dict[str, Any] | None = None) -> ClassifiedError:
    # Surfaced errors are never retryable.
    return ClassifiedError(
        category=category,
        is_retryable=False,
        status_code=category.status_code,
        user_message=message,
        internal_detail=detail,
    )


def _is_timeout_exception(error: Any) -> bool:
    return isinstance(error, (TimeoutError, httpx.TimeoutException))


def classify_error(
    error: Any,
    context: OperationContext | str,
    *,
    is_development: bool = False,
) -> ClassifiedError:
    context = OperationContext(context)
    status = error_status(error)
    code = error_code(error)
    raw_message = error_message(error)
    message = raw_message.lower()

    if status == 401 or any(marker in message for marker in AUTH_MESSAGE_MARKERS):
        return _classified(ErrorCategory.AUTH_UNAVAILABLE, AUTH_MESSAGE)

    if status == 429 or any(marker in message for marker in QUOTA_MESSAGE_MARKERS):
        return _classified(ErrorCategory.QUOTA_EXCEEDED, QUOTA_MESSAGE)

    if ("content" in message and "filter" in message) or ("blocked" in message and "safety" in message):
        return _classified(ErrorCategory.CONTENT_FILTERED, CONTENT_FILTERED_MESSAGE)

    if code in NETWORK_CODES:
        return _classified(ErrorCategory.NETWORK_UNAVAILABLE, NETWORK_MESSAGE)

    if (
        code in TIMEOUT_CODES
        or _is_timeout_exception(error)
        or any(marker in message for marker in TIMEOUT_MESSAGE_MARKERS)
    ):
        return _classified(ErrorCategory.TIMEOUT, TIMEOUT_MESSAGES[context])

    if status in PERMANENT_STATUS_CODES:
        return _classified(ErrorCategory.PERMANENT_CLIENT_ERROR, PERMANENT_MESSAGE)

    detail = {"originalError": raw_message} if is_development else None
    return _classified(ErrorCategory.UNKNOWN_SERVER_ERROR, GENERIC_MESSAGES[context], detail)
