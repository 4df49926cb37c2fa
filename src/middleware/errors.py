from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.models.errors import ProxyError, RateLimitError

logger = logging.getLogger(__name__)


def _serialize_error(code: str, message: str, details: Any = None) -> dict[str, object]:
    error: dict[str, object] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def _rate_limit_headers(exc: RateLimitError) -> dict[str, str]:
    headers: dict[str, str] = {}
    if exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    details = exc.details or {}
    if "limit" in details:
        headers["x-ratelimit-limit"] = str(details["limit"])
        headers["x-ratelimit-remaining"] = "0"
    if "retryAfter" in details:
        headers["x-ratelimit-reset"] = str(details["retryAfter"])
    return headers


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
        headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitError) else {}
        if exc.status_code >= 500:
            logger.error("request failed: %s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error_code)
        else:
            logger.info("request rejected: %s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error_code)
        return JSONResponse(
            status_code=exc.status_code,
            content=_serialize_error(exc.error_code, exc.message, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = {"errors": jsonable_encoder(exc.errors(), exclude={"input", "ctx", "url"})}
        return JSONResponse(
            status_code=400,
            content=_serialize_error("INVALID_REQUEST", "Request validation failed", details),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled exception", exc_info=exc)
        settings = getattr(request.app.state, "settings", None)
        if settings is not None and settings.is_production:
            message = "An unexpected error occurred"
        else:
            message = str(exc) or "An unexpected error occurred"
        return JSONResponse(status_code=500, content=_serialize_error("INTERNAL_ERROR", message))
