from __future__ import annotations

import hmac

from fastapi import Header, Request

from src.models.errors import AuthenticationError


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    if not x_api_key:
        raise AuthenticationError()

    expected = getattr(request.app.state.settings, "api_key", None)
    if not expected or not hmac.compare_digest(x_api_key.encode("utf-8"), expected.encode("utf-8")):
        raise AuthenticationError()
