from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from src.services.failure_signals import error_code, error_message, error_status, retry_after_hint

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUS_CODES = frozenset({429, 500, 503})
PERMANENT_STATUS_CODES = frozenset({400, 401, 403, 404})
TRANSIENT_PATTERN = re.compile(r"timeout|ECONNRESET|ETIMEDOUT|ENOTFOUND", re.IGNORECASE)
DEFAULT_FAILURE_MESSAGE = "Gemini API request failed"


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 32.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError(f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}")


DEFAULT_RETRY_POLICY = RetryPolicy()


class UpstreamCallError(Exception):
    """Single normalized failure raised once the retry engine gives up."""

    def __init__(self, message: str, status_code: int = 500, code: str | None = None, permanent: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.permanent = permanent


def is_transient_error(error: Any) -> bool:
    if error_status(error) in TRANSIENT_STATUS_CODES:
        return True
    # Some transports only signal transient trouble through a message, an
    # errno-style code or the exception class name.
    haystack = " ".join(
        part for part in (error_message(error), error_code(error), type(error).__name__) if part
    )
    return bool(TRANSIENT_PATTERN.search(haystack))


def is_permanent_error(error: Any) -> bool:
    return error_status(error) in PERMANENT_STATUS_CODES


def _normalize(error: BaseException, *, permanent: bool = False) -> UpstreamCallError:
    return UpstreamCallError(
        error_message(error) or DEFAULT_FAILURE_MESSAGE,
        status_code=error_status(error) or 500,
        code=error_code(error),
        permanent=permanent,
    )


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_retry: Callable[[int, float, BaseException], None] | None = None,
) -> T:
    """Run ``operation`` with exponential backoff on transient failures.

    Permanent failures (400/401/403/404) abort at once without consuming a
    retry. A ``retry-after`` hint on the failure replaces the computed wait
    for that attempt only; the backoff still advances.

    Raises:
        UpstreamCallError: when retries are exhausted, the failure is not
            transient, or the failure is permanent.
    """
    policy = policy or DEFAULT_RETRY_POLICY
    delay = policy.initial_delay
    attempt = 0

    while True:
        try:
            return await operation()
        except Exception as exc:
            if is_permanent_error(exc):
                raise _normalize(exc, permanent=True) from exc

            if attempt >= policy.max_retries or not is_transient_error(exc):
                raise _normalize(exc) from exc

            hint = retry_after_hint(exc)
            wait = hint if hint is not None else min(delay, policy.max_delay)
            logger.warning(
                "transient upstream failure, retrying: attempt=%d wait=%.2fs status=%s error=%s",
                attempt + 1,
                wait,
                error_status(exc),
                error_message(exc)[:200],
            )
            if on_retry is not None:
                on_retry(attempt + 1, wait, exc)

            await sleep(wait)
            delay *= policy.backoff_multiplier
            attempt += 1
