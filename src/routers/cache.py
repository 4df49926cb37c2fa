from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from src.middleware.auth import require_api_key
from src.models.responses import CacheClearResponse, CacheStatsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(request: Request):
    return request.app.state.analyze_cache.get_stats().to_dict()


@router.delete("", response_model=CacheClearResponse, dependencies=[Depends(require_api_key)])
async def clear_cache(request: Request):
    cleared = request.app.state.analyze_cache.clear()
    logger.info("analyze cache cleared: entries=%d", cleared)
    return CacheClearResponse(cleared=cleared)
