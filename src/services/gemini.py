from __future__ import annotations

import asyncio
import json
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Mapping

import httpx
from pydantic import BaseModel, ValidationError

from src.metrics import (
    increment_upstream_request,
    increment_upstream_retry,
    increment_usage,
    observe_upstream_latency,
)
from src.models.errors import UpstreamError
from src.services import prompts
from src.services.error_classifier import OperationContext
from src.services.retry import DEFAULT_RETRY_POLICY, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-3-pro-preview"

# USD per one million tokens.
INPUT_PRICE_PER_MILLION = 2.00
OUTPUT_PRICE_PER_MILLION = 12.00

IDENTIFY_TEMPERATURE = 0.2
ANALYZE_TEMPERATURE = 0.3

BLOCKED_FINISH_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"})

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo",
)


def estimate_cost(prompt_tokens: int, completion_tokens: int) -> float:
    return (prompt_tokens / 1_000_000) * INPUT_PRICE_PER_MILLION + (
        completion_tokens / 1_000_000
    ) * OUTPUT_PRICE_PER_MILLION


class GeminiService:
    """Thin client for the Gemini ``generateContent`` REST endpoint.

    Every call runs through :func:`call_with_retry`; failures leave this
    class as :class:`UpstreamCallError` and are classified by the caller.
    """

    def __init__(
        self,
        api_key: str | None,
        http_client: httpx.AsyncClient,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        policies: Mapping[OperationContext, RetryPolicy] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if not api_key:
            raise UpstreamError("Gemini API key is not configured", status_code=401, code="UNAUTHENTICATED")
        self.api_key = api_key
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.policies = dict(policies or {})
        self._sleep = sleep

    async def identify_phrase(
        self,
        screenshot: str,
        *,
        selection_x: float,
        selection_y: float,
        image_width: int,
        image_height: int,
    ) -> dict[str, Any]:
        prompt = prompts.build_identify_prompt(
            selection_x=selection_x,
            selection_y=selection_y,
            image_width=image_width,
            image_height=image_height,
        )
        return await self._generate(
            OperationContext.IDENTIFY_PHRASE,
            self._parts(prompt, screenshot),
            prompts.phrase_schema(),
            IDENTIFY_TEMPERATURE,
        )

    async def identify_phrases(self, screenshot: str, *, max_phrases: int = prompts.DEFAULT_MAX_PHRASES) -> list[dict[str, Any]]:
        prompt = prompts.build_identify_phrases_prompt(max_phrases)
        result = await self._generate(
            OperationContext.IDENTIFY_PHRASES,
            self._parts(prompt, screenshot),
            prompts.phrases_schema(),
            IDENTIFY_TEMPERATURE,
        )
        phrases = result.get("phrases", []) if isinstance(result, dict) else result
        return list(phrases or [])[:max_phrases]

    async def analyze_content(
        self,
        phrase: str,
        action: str,
        *,
        full_phrase: str | None = None,
        image: str | None = None,
    ) -> dict[str, Any]:
        prompt = prompts.build_analysis_prompt(phrase, action, full_phrase=full_phrase, has_image=bool(image))
        return await self._generate(
            OperationContext.ANALYZE,
            self._parts(prompt, image),
            prompts.analysis_schema(action),
            ANALYZE_TEMPERATURE,
        )

    @staticmethod
    def _parts(prompt: str, image: str | None) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = []
        if image:
            parts.append({"inlineData": {"mimeType": "image/png", "data": image}})
        parts.append({"text": prompt})
        return parts

    async def _generate(
        self,
        operation: OperationContext,
        parts: list[dict[str, Any]],
        schema: dict[str, Any],
        temperature: float,
    ) -> Any:
        body = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
                "temperature": temperature,
            },
        }

        def on_retry(attempt: int, wait: float, exc: BaseException) -> None:
            increment_upstream_retry(operation=operation.name.lower())

        return await call_with_retry(
            lambda: self._request(operation, body),
            self.policies.get(operation, DEFAULT_RETRY_POLICY),
            sleep=self._sleep,
            on_retry=on_retry,
        )

    async def _request(self, operation: OperationContext, body: dict[str, Any]) -> Any:
        label = operation.name.lower()
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        start = perf_counter()
        try:
            response = await self.http_client.post(url, headers=headers, json=body, timeout=self.timeout)
        except httpx.TransportError as exc:
            increment_upstream_request(operation=label, outcome="transport_error")
            raise _map_transport_error(exc) from exc
        finally:
            observe_upstream_latency(operation=label, latency_seconds=perf_counter() - start)

        if response.status_code >= 400:
            increment_upstream_request(operation=label, outcome="http_error")
            raise _map_http_error(response)

        increment_upstream_request(operation=label, outcome="success")
        data = response.json()
        self._log_usage(label, data.get("usageMetadata") or {})

        block_reason = _block_reason(data)
        if block_reason:
            logger.warning("Gemini blocked %s: reason=%s", label, block_reason)
            raise UpstreamError(
                f"Content blocked by safety filter: {block_reason}", status_code=400, code="CONTENT_BLOCKED"
            )

        text = _response_text(data)
        if not text:
            raise UpstreamError("Gemini API returned empty response", status_code=502, code="API_ERROR")
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("failed to parse Gemini response for %s: %s", label, exc)
            raise UpstreamError("Invalid JSON response from Gemini API", status_code=502, code="API_ERROR") from exc

    def _log_usage(self, operation: str, usage: dict[str, Any]) -> None:
        prompt_tokens = int(usage.get("promptTokenCount") or 0)
        completion_tokens = int(usage.get("candidatesTokenCount") or 0)
        total_tokens = int(usage.get("totalTokenCount") or prompt_tokens + completion_tokens)
        cost = estimate_cost(prompt_tokens, completion_tokens)
        increment_usage(
            operation=operation,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            spend=cost,
        )
        logger.info(
            "Gemini API call completed: operation=%s input_tokens=%d output_tokens=%d total_tokens=%d cost_usd=%.6f",
            operation,
            prompt_tokens,
            completion_tokens,
            total_tokens,
            cost,
        )


def _block_reason(data: dict[str, Any]) -> str | None:
    feedback = data.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        return str(feedback["blockReason"])
    for candidate in data.get("candidates") or []:
        reason = candidate.get("finishReason")
        if reason in BLOCKED_FINISH_REASONS:
            return reason
    return None


def _response_text(data: dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def parse_payload(model: type[BaseModel], data: Any) -> BaseModel:
    """Validate a decoded Gemini payload against ``model``.

    A mismatch surfaces as an :class:`UpstreamError` so it is classified
    like any other upstream failure.
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error("unexpected Gemini payload for %s: %d errors", model.__name__, exc.error_count())
        raise UpstreamError("Unexpected response structure from Gemini API", status_code=502, code="API_ERROR") from exc


def _map_http_error(response: httpx.Response) -> UpstreamError:
    try:
        error = response.json().get("error") or {}
    except (ValueError, AttributeError):
        error = {}

    status_name = error.get("status") if isinstance(error, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    message = message or f"Gemini API responded with HTTP {response.status_code}"
    if status_name:
        message = f"{status_name}: {message}"

    retry_after: float | None = None
    header = response.headers.get("retry-after")
    if header:
        try:
            retry_after = float(header)
        except ValueError:
            retry_after = None

    return UpstreamError(message, status_code=response.status_code, code=status_name, retry_after=retry_after)


def _map_transport_error(exc: httpx.TransportError) -> UpstreamError:
    detail = str(exc) or type(exc).__name__
    if isinstance(exc, httpx.TimeoutException):
        return UpstreamError(f"Request to Gemini timed out: {detail}", code="ETIMEDOUT")
    if isinstance(exc, httpx.ConnectError):
        if any(marker in detail.lower() for marker in _DNS_FAILURE_MARKERS):
            return UpstreamError(f"Gemini host could not be resolved: {detail}", code="ENOTFOUND")
        return UpstreamError(f"Connection to Gemini refused: {detail}", code="ECONNREFUSED")
    return UpstreamError(f"Connection to Gemini reset: {detail}", code="ECONNRESET")
