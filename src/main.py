from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.cache import AnalyzeCache, PrometheusCacheMetrics
from src.config import Settings, get_settings
from src.logging_config import configure_logging
from src.middleware.errors import register_exception_handlers
from src.routers import analyze_router, cache_router, health_router, identify_router, metrics_router
from src.services.error_classifier import OperationContext
from src.services.gemini import GeminiService
from src.services.limit_counter import LimitCounter
from src.services.service_factory import create_service_factory

logger = logging.getLogger(__name__)

DEVELOPMENT_ORIGIN_REGEX = r"^(chrome-extension://.*|http://localhost.*)$"


def _cors_options(settings: Settings) -> dict[str, object]:
    origins = [f"chrome-extension://{settings.chrome_extension_id}"] if settings.chrome_extension_id else []
    options: dict[str, object] = {
        "allow_origins": origins,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "DELETE", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization", "X-API-Key"],
        "expose_headers": ["x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset", "x-cache-hit"],
        "max_age": 86400,
    }
    if settings.is_development:
        options["allow_origin_regex"] = DEVELOPMENT_ORIGIN_REGEX
    return options


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # A client built on demand before startup is adopted so it is closed on shutdown.
    if getattr(app.state, "http_client", None) is None:
        app.state.http_client = httpx.AsyncClient(timeout=settings.gemini_timeout)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; upstream calls will fail until it is configured")
    logger.info("application startup complete: env=%s model=%s", settings.app_env, settings.gemini_model)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        app.state.http_client = None


def _build_gemini_service(app: FastAPI) -> GeminiService:
    settings: Settings = app.state.settings
    http_client = getattr(app.state, "http_client", None)
    if http_client is None:
        logger.warning("Gemini client requested outside the application lifespan; creating a shared HTTP client")
        http_client = httpx.AsyncClient(timeout=settings.gemini_timeout)
        app.state.http_client = http_client
    return GeminiService(
        settings.gemini_api_key,
        http_client,
        base_url=settings.gemini_base_url,
        model=settings.gemini_model,
        timeout=settings.gemini_timeout,
        policies={operation: settings.retry_policy(operation) for operation in OperationContext},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.secrets())

    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.analyze_cache = AnalyzeCache(
        max_entries=settings.cache_max_entries,
        ttl_seconds=settings.cache_ttl_seconds,
        update_recency_on_get=settings.cache_update_recency_on_get,
        metrics=PrometheusCacheMetrics(cache_type="analyze"),
    )
    app.state.limit_counter = LimitCounter(window_seconds=settings.rate_limit_window_seconds)
    # Built on first use so a missing Gemini key surfaces per request, not at startup.
    app.state.get_gemini_service = create_service_factory(lambda: _build_gemini_service(app))

    register_exception_handlers(app)
    app.add_middleware(CORSMiddleware, **_cors_options(settings))

    app.include_router(health_router)
    app.include_router(identify_router)
    app.include_router(analyze_router)
    app.include_router(cache_router)
    app.include_router(metrics_router)
    return app


def cli():
    """Command line interface for the Phrase Lens API server."""
    import argparse

    import uvicorn

    settings = get_settings()
    parser = argparse.ArgumentParser(description="Phrase Lens API server")
    parser.add_argument("--host", "-H", help="Host to bind to", default=settings.host)
    parser.add_argument("--port", "-p", help="Port to bind to", type=int, default=settings.port)
    args = parser.parse_args()

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


app = create_app()


if __name__ == "__main__":
    cli()
