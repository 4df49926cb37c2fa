from __future__ import annotations

import pytest

from conftest import VALID_JPEG_BASE64, VALID_PNG_BASE64
from src.models.errors import UpstreamError
from src.services.retry import UpstreamCallError


@pytest.mark.asyncio
async def test_translate_then_cache_hit_then_explain(client, test_app, auth_headers):
    fake = test_app.state._fake_gemini
    fake.analyze_outcomes = [{"translation": "Hello"}, {"meaning": "greeting", "contextUsage": "daytime"}]

    first = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "こんにちは", "action": "translate"})
    second = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "こんにちは", "action": "translate"})
    third = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "こんにちは", "action": "explain"})

    assert first.status_code == second.status_code == third.status_code == 200
    assert first.json() == second.json() == {"translation": "Hello"}
    assert third.json()["meaning"] == "greeting"
    assert first.headers["x-cache-hit"] == "false"
    assert second.headers["x-cache-hit"] == "true"
    assert third.headers["x-cache-hit"] == "false"
    assert fake.call_count("analyze_content") == 2

    stats = (await client.get("/api/cache/stats")).json()
    assert stats == {"size": 2, "maxSize": 1000, "hits": 1, "misses": 2, "hitRate": pytest.approx(1 / 3)}


@pytest.mark.asyncio
async def test_context_is_forwarded_and_keyed(client, test_app, auth_headers):
    fake = test_app.state._fake_gemini

    await client.post("/api/analyze", headers=auth_headers, json={"phrase": "食べる", "action": "translate"})
    response = await client.post(
        "/api/analyze",
        headers=auth_headers,
        json={
            "phrase": "食べる",
            "action": "translate",
            "context": {"fullPhrase": "明日は寿司を食べる", "image": f"data:image/png;base64,{VALID_PNG_BASE64}"},
        },
    )

    assert response.headers["x-cache-hit"] == "false"
    _, args, kwargs = fake.calls[-1]
    assert args == ("食べる", "translate")
    assert kwargs == {"full_phrase": "明日は寿司を食べる", "image": VALID_PNG_BASE64}


@pytest.mark.asyncio
async def test_conjugation_is_a_supported_action(client, auth_headers):
    response = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "食べます", "action": "conjugation"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_failed_analysis_is_not_cached(client, test_app, auth_headers):
    fake = test_app.state._fake_gemini
    fake.analyze_outcomes = [UpstreamCallError("backend exploded", status_code=500), {"translation": "Hello"}]
    body = {"phrase": "こんにちは", "action": "translate"}

    failed = await client.post("/api/analyze", headers=auth_headers, json=body)
    retried = await client.post("/api/analyze", headers=auth_headers, json=body)

    assert failed.status_code == 500
    assert failed.json() == {
        "success": False,
        "error": {"code": "UNKNOWN_SERVER_ERROR", "message": "Failed to analyze phrase"},
    }
    assert retried.status_code == 200
    assert retried.headers["x-cache-hit"] == "false"
    assert fake.call_count("analyze_content") == 2


@pytest.mark.parametrize(
    ("failure", "status", "code"),
    [
        (UpstreamCallError("API key not valid", status_code=400), 503, "AUTH_UNAVAILABLE"),
        (UpstreamCallError("RESOURCE_EXHAUSTED: quota", status_code=429), 503, "QUOTA_EXCEEDED"),
        (UpstreamCallError("connect failed", code="ECONNREFUSED"), 503, "NETWORK_UNAVAILABLE"),
        (UpstreamCallError("deadline", code="ETIMEDOUT"), 504, "TIMEOUT"),
        (UpstreamCallError("blocked for safety", status_code=500), 400, "CONTENT_FILTERED"),
        (UpstreamCallError("model not found", status_code=404), 400, "PERMANENT_CLIENT_ERROR"),
    ],
)
@pytest.mark.asyncio
async def test_upstream_failures_are_classified(client, test_app, auth_headers, failure, status, code):
    test_app.state._fake_gemini.analyze_outcomes = [failure]

    response = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "猫", "action": "translate"})

    assert response.status_code == status
    assert response.json()["error"]["code"] == code
    assert "details" not in response.json()["error"]


@pytest.mark.asyncio
async def test_missing_gemini_key_surfaces_as_unavailable(client, test_app, auth_headers):
    def broken_factory():
        raise UpstreamError("Gemini API key is not configured", status_code=401)

    test_app.state.get_gemini_service = broken_factory

    response = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "猫", "action": "translate"})

    assert response.status_code == 503
    assert response.json()["error"] == {
        "code": "AUTH_UNAVAILABLE",
        "message": "Service temporarily unavailable. Please contact support.",
    }


@pytest.mark.parametrize(
    "body",
    [
        {"action": "translate"},
        {"phrase": "", "action": "translate"},
        {"phrase": "猫", "action": "sing"},
        {"phrase": "猫"},
    ],
)
@pytest.mark.asyncio
async def test_schema_violations_are_rejected(client, test_app, auth_headers, body):
    response = await client.post("/api/analyze", headers=auth_headers, json=body)

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "INVALID_REQUEST"
    assert payload["error"]["message"] == "Request validation failed"
    assert test_app.state._fake_gemini.calls == []


@pytest.mark.asyncio
async def test_blank_phrase_is_rejected(client, test_app, auth_headers):
    response = await client.post("/api/analyze", headers=auth_headers, json={"phrase": "   ", "action": "translate"})

    assert response.status_code == 400
    assert response.json()["error"] == {"code": "INVALID_REQUEST", "message": "Phrase cannot be empty"}
    assert test_app.state._fake_gemini.calls == []


@pytest.mark.asyncio
async def test_non_png_context_image_is_rejected(client, test_app, auth_headers):
    response = await client.post(
        "/api/analyze",
        headers=auth_headers,
        json={"phrase": "猫", "action": "translate", "context": {"image": VALID_JPEG_BASE64}},
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Image must be PNG format"
    assert test_app.state._fake_gemini.calls == []
