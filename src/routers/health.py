from __future__ import annotations

import time

from fastapi import APIRouter, Request

from src.models.responses import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return HealthResponse(
        status="ok",
        timestamp=int(time.time() * 1000),
        uptime=round(time.monotonic() - started_at, 3),
    )
