from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from src.cache.analyze_cache import AnalyzeCache
from src.metrics import increment_classified_error
from src.models.errors import ProxyError
from src.services.error_classifier import OperationContext, classify_error
from src.services.failure_signals import error_message, error_status

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def resilient_call(
    operation: Callable[[], Awaitable[T]],
    *,
    context: OperationContext,
    is_development: bool = False,
) -> T:
    """Await ``operation`` and turn any unclassified failure into an ``ApiError``.

    ``ProxyError`` instances were raised by this service on purpose and
    pass through untouched. Everything else is classified exactly once.
    """
    try:
        return await operation()
    except ProxyError:
        raise
    except Exception as exc:
        classified = classify_error(exc, context, is_development=is_development)
        logger.error(
            "upstream call failed: context=%s category=%s status=%s error=%s",
            context.value,
            classified.category.value,
            error_status(exc),
            error_message(exc)[:500],
        )
        increment_classified_error(operation=context.name.lower(), category=classified.category.value)
        raise classified.to_api_error() from exc


async def analyze_with_cache(
    cache: AnalyzeCache,
    operation: Callable[[], Awaitable[Any]],
    *,
    phrase: str,
    action: str,
    full_phrase: str | None = None,
    is_development: bool = False,
) -> tuple[Any, bool]:
    key = AnalyzeCache.generate_key(phrase, action, full_phrase)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("analyze cache hit: action=%s", action)
        return cached, True

    result = await resilient_call(operation, context=OperationContext.ANALYZE, is_development=is_development)
    # None reads back as a miss, so it is never stored.
    if result is not None:
        cache.set(key, result)
    return result, False
