from __future__ import annotations

import base64

import pytest

from conftest import PHRASE_RESULT, VALID_JPEG_BASE64, VALID_PNG_BASE64
from src.services.retry import UpstreamCallError


def identify_payload(**overrides):
    payload = {
        "image": f"data:image/png;base64,{VALID_PNG_BASE64}",
        "selection": {"x": 100, "y": 200, "width": 300, "height": 100, "devicePixelRatio": 2},
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_identify_phrase_returns_phrase_data(client, test_app, auth_headers):
    response = await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload())

    assert response.status_code == 200
    assert response.json() == PHRASE_RESULT
    name, args, kwargs = test_app.state._fake_gemini.calls[0]
    assert name == "identify_phrase"
    assert args == (VALID_PNG_BASE64,)
    assert kwargs == {"selection_x": 100, "selection_y": 200, "image_width": 600, "image_height": 200}


@pytest.mark.asyncio
async def test_identify_phrase_is_never_cached(client, test_app, auth_headers):
    await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload())
    await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload())

    assert test_app.state._fake_gemini.call_count("identify_phrase") == 2
    assert test_app.state.analyze_cache.get_stats().size == 0


@pytest.mark.asyncio
async def test_identify_phrase_rejects_invalid_selection(client, auth_headers):
    payload = identify_payload(selection={"x": -1, "y": 0, "width": 0, "height": 10, "devicePixelRatio": 1})

    response = await client.post("/api/identify-phrase", headers=auth_headers, json=payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_identify_phrase_rejects_jpeg(client, test_app, auth_headers):
    response = await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload(image=VALID_JPEG_BASE64))

    assert response.status_code == 400
    assert response.json()["error"] == {"code": "INVALID_REQUEST", "message": "Image must be PNG format"}
    assert test_app.state._fake_gemini.calls == []


@pytest.mark.asyncio
async def test_identify_phrase_rejects_oversized_image(client, test_app, auth_headers):
    test_app.state.settings = test_app.state.settings.model_copy(update={"max_image_size": 1024 * 1024})
    image = base64.b64encode(b"\x89PNG" + b"\x00" * (2 * 1024 * 1024)).decode("ascii")

    response = await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload(image=image))

    assert response.status_code == 413
    assert response.json()["error"] == {
        "code": "IMAGE_TOO_LARGE",
        "message": "Image size (2.00MB) exceeds limit of 1MB",
    }


@pytest.mark.asyncio
async def test_identify_phrase_timeout_uses_selection_message(client, test_app, auth_headers):
    test_app.state._fake_gemini.identify_outcomes = [UpstreamCallError("deadline exceeded", code="ETIMEDOUT")]

    response = await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload())

    assert response.status_code == 504
    assert response.json()["error"]["message"] == (
        "Request timed out. Please try again with a smaller image or selection."
    )


@pytest.mark.asyncio
async def test_identify_phrases_returns_list(client, test_app, auth_headers):
    response = await client.post(
        "/api/identify-phrases",
        headers=auth_headers,
        json={"image": VALID_PNG_BASE64, "maxPhrases": 10, "metadata": {"url": "https://example.jp", "title": "例"}},
    )

    assert response.status_code == 200
    assert response.json() == {"phrases": [PHRASE_RESULT]}
    _, _, kwargs = test_app.state._fake_gemini.calls[0]
    assert kwargs == {"max_phrases": 10}


@pytest.mark.asyncio
async def test_identify_phrases_defaults_max_phrases(client, test_app, auth_headers):
    await client.post("/api/identify-phrases", headers=auth_headers, json={"image": VALID_PNG_BASE64})

    _, _, kwargs = test_app.state._fake_gemini.calls[0]
    assert kwargs == {"max_phrases": 25}


@pytest.mark.parametrize("max_phrases", [0, 101])
@pytest.mark.asyncio
async def test_identify_phrases_bounds_max_phrases(client, auth_headers, max_phrases):
    response = await client.post(
        "/api/identify-phrases",
        headers=auth_headers,
        json={"image": VALID_PNG_BASE64, "maxPhrases": max_phrases},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_identify_phrases_timeout_uses_phrases_message(client, test_app, auth_headers):
    test_app.state._fake_gemini.phrases_outcomes = [TimeoutError()]

    response = await client.post("/api/identify-phrases", headers=auth_headers, json={"image": VALID_PNG_BASE64})

    assert response.status_code == 504
    assert response.json()["error"]["message"] == (
        "Request timed out. Please try again with a smaller image or fewer phrases."
    )


@pytest.mark.asyncio
async def test_identify_phrase_malformed_upstream_reply_is_classified(client, test_app, auth_headers):
    test_app.state._fake_gemini.identify_outcomes = [{"romaji": "x"}]

    response = await client.post("/api/identify-phrase", headers=auth_headers, json=identify_payload())

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": {"code": "UNKNOWN_SERVER_ERROR", "message": "Failed to identify phrase from screenshot"},
    }


@pytest.mark.asyncio
async def test_identify_phrases_malformed_upstream_reply_is_classified(client, test_app, auth_headers):
    test_app.state._fake_gemini.phrases_outcomes = [[{"tokens": "nope"}]]

    response = await client.post("/api/identify-phrases", headers=auth_headers, json={"image": VALID_PNG_BASE64})

    assert response.status_code == 500
    assert response.json()["error"] == {
        "code": "UNKNOWN_SERVER_ERROR",
        "message": "Failed to identify phrases from screenshot",
    }
