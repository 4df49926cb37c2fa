from __future__ import annotations

import logging
import math

from fastapi import APIRouter, Depends, Request

from src.middleware.auth import require_api_key
from src.middleware.rate_limit import enforce_rate_limits
from src.models.requests import IdentifyPhraseRequest, IdentifyPhrasesRequest
from src.models.responses import IdentifyPhrasesResponse, PhraseData
from src.services.error_classifier import OperationContext
from src.services.gemini import parse_payload
from src.services.image_validation import validate_image
from src.services.orchestrator import resilient_call

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["identify"])


@router.post(
    "/identify-phrase",
    response_model=PhraseData,
    dependencies=[Depends(require_api_key), Depends(enforce_rate_limits)],
)
async def identify_phrase(request: Request, payload: IdentifyPhraseRequest):
    settings = request.app.state.settings
    image = validate_image(payload.image, settings.max_image_size)

    # The client crops the screenshot to the selection, so the image is the
    # selection size in device pixels.
    selection = payload.selection
    image_width = math.ceil(selection.width * selection.device_pixel_ratio)
    image_height = math.ceil(selection.height * selection.device_pixel_ratio)
    logger.debug(
        "identify phrase: image_bytes=%d size=%dx%d url=%s",
        image.size,
        image_width,
        image_height,
        payload.metadata.url if payload.metadata else None,
    )

    async def _call():
        result = await request.app.state.get_gemini_service().identify_phrase(
            image.base64_data,
            selection_x=selection.x,
            selection_y=selection.y,
            image_width=image_width,
            image_height=image_height,
        )
        return parse_payload(PhraseData, result)

    return await resilient_call(
        _call,
        context=OperationContext.IDENTIFY_PHRASE,
        is_development=settings.is_development,
    )


@router.post(
    "/identify-phrases",
    response_model=IdentifyPhrasesResponse,
    dependencies=[Depends(require_api_key), Depends(enforce_rate_limits)],
)
async def identify_phrases(request: Request, payload: IdentifyPhrasesRequest):
    settings = request.app.state.settings
    image = validate_image(payload.image, settings.max_image_size)
    logger.debug("identify phrases: image_bytes=%d max_phrases=%d", image.size, payload.max_phrases)

    async def _call():
        phrases = await request.app.state.get_gemini_service().identify_phrases(
            image.base64_data,
            max_phrases=payload.max_phrases,
        )
        return parse_payload(IdentifyPhrasesResponse, {"phrases": phrases})

    return await resilient_call(
        _call,
        context=OperationContext.IDENTIFY_PHRASES,
        is_development=settings.is_development,
    )
