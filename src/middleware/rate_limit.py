from __future__ import annotations

from fastapi import Request, Response

from src.models.errors import RateLimitError
from src.services.limit_counter import LimitCounter

DEVELOPMENT_ALLOW_LIST = frozenset({"127.0.0.1", "::1"})


def _client_ip(request: Request) -> str:
    client = request.client
    return client.host if client is not None else "unknown"


async def enforce_rate_limits(request: Request, response: Response) -> None:
    settings = request.app.state.settings
    client_ip = _client_ip(request)
    if settings.is_development and client_ip in DEVELOPMENT_ALLOW_LIST:
        return

    limiter: LimitCounter = request.app.state.limit_counter
    status = limiter.hit(request.url.path, client_ip, settings.rate_limit_max_requests)

    if status.exceeded:
        raise RateLimitError(
            message=f"Rate limit exceeded. Retry after {status.reset_after} seconds",
            retry_after=status.reset_after,
            details={
                "limit": status.limit,
                "current": status.current,
                "retryAfter": status.reset_after,
            },
        )

    response.headers["x-ratelimit-limit"] = str(status.limit)
    response.headers["x-ratelimit-remaining"] = str(status.remaining)
    response.headers["x-ratelimit-reset"] = str(status.reset_after)
