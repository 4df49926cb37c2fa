from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from src.middleware.auth import require_api_key
from src.middleware.rate_limit import enforce_rate_limits
from src.models.errors import InvalidRequestError
from src.models.requests import AnalyzeRequest
from src.services.image_validation import validate_image
from src.services.orchestrator import analyze_with_cache

router = APIRouter(prefix="/api", tags=["analyze"])


@router.post("/analyze", dependencies=[Depends(require_api_key), Depends(enforce_rate_limits)])
async def analyze(request: Request, response: Response, payload: AnalyzeRequest):
    settings = request.app.state.settings
    if not payload.phrase.strip():
        raise InvalidRequestError(message="Phrase cannot be empty")

    context = payload.context
    full_phrase = context.full_phrase if context else None
    image_data: str | None = None
    if context and context.image:
        image_data = validate_image(context.image, settings.max_image_size).base64_data

    async def _call():
        return await request.app.state.get_gemini_service().analyze_content(
            payload.phrase,
            payload.action,
            full_phrase=full_phrase,
            image=image_data,
        )

    result, cache_hit = await analyze_with_cache(
        request.app.state.analyze_cache,
        _call,
        phrase=payload.phrase,
        action=payload.action,
        full_phrase=full_phrase,
        is_development=settings.is_development,
    )
    response.headers["x-cache-hit"] = "true" if cache_hit else "false"
    return result
