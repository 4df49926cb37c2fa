from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from src.config import Settings
from src.main import create_app

TEST_API_KEY = "test-api-key"

# 1x1 transparent PNG.
VALID_PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)
VALID_JPEG_BASE64 = "/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAAgGBgcGBQgHBwcJCQgKDBQNDAsLDBkSEw8UHRofHh0aHBwgJC4nICIsIxwcKDcpLDAxNDQ0Hyc5PTgyPC4zNDL/2wBDAQkJCQwLDBgNDRgyIRwhMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjL/wAARCAABAAEDASIAAhEBAxEB/8QAFQABAQAAAAAAAAAAAAAAAAAAAAv/xAAUEAEAAAAAAAAAAAAAAAAAAAAA/8QAFQEBAQAAAAAAAAAAAAAAAAAAAAX/xAAUEQEAAAAAAAAAAAAAAAAAAAAA/9oADAMBAAIRAxEAPwCwABmQ/9k="

PHRASE_RESULT = {
    "phrase": "こんにちは",
    "romaji": "konnichiwa",
    "boundingBox": [100, 120, 300, 480],
    "tokens": [
        {
            "word": "こんにちは",
            "reading": "こんにちは",
            "romaji": "konnichiwa",
            "partOfSpeech": ["interjection"],
            "hasKanji": False,
            "isCommon": True,
        }
    ],
}


class FakeGeminiService:
    """Stands in for GeminiService; records calls and replays configured outcomes.

    ``*_outcomes`` lists are consumed front to back; an ``Exception`` entry is
    raised, anything else is returned. When a list is empty the default
    result is returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.identify_outcomes: list[Any] = []
        self.phrases_outcomes: list[Any] = []
        self.analyze_outcomes: list[Any] = []

    def call_count(self, method: str) -> int:
        return sum(1 for name, _, _ in self.calls if name == method)

    @staticmethod
    def _next(outcomes: list[Any], default: Any) -> Any:
        outcome = outcomes.pop(0) if outcomes else default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def identify_phrase(self, screenshot: str, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("identify_phrase", (screenshot,), kwargs))
        return self._next(self.identify_outcomes, PHRASE_RESULT)

    async def identify_phrases(self, screenshot: str, **kwargs: Any) -> list[dict[str, Any]]:
        self.calls.append(("identify_phrases", (screenshot,), kwargs))
        return self._next(self.phrases_outcomes, [PHRASE_RESULT])

    async def analyze_content(self, phrase: str, action: str, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("analyze_content", (phrase, action), kwargs))
        return self._next(self.analyze_outcomes, {"translation": f"{action}:{phrase}"})


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        app_env="test",
        api_key=TEST_API_KEY,
        gemini_api_key="gemini-test-key",
        rate_limit_max_requests=50,
    )


@pytest.fixture
async def test_app(test_settings: Settings) -> FastAPI:
    app = create_app(test_settings)
    fake_gemini = FakeGeminiService()
    app.state.get_gemini_service = lambda: fake_gemini
    app.state._fake_gemini = fake_gemini
    return app


@pytest.fixture
async def client(test_app: FastAPI):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": TEST_API_KEY}
