from __future__ import annotations

import time

from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.metrics import get_prometheus_registry, set_cache_state, set_uptime

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics(request: Request) -> Response:
    # Point-in-time gauges are sampled at scrape time.
    stats = request.app.state.analyze_cache.get_stats()
    set_cache_state(cache_type="analyze", size=stats.size, hit_rate=stats.hit_rate)
    set_uptime(time.monotonic() - request.app.state.started_at)
    return Response(content=generate_latest(get_prometheus_registry()), media_type=CONTENT_TYPE_LATEST)
