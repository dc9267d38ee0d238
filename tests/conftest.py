# tests/conftest.py - v1
"""Shared test fixtures for unit and integration tests.

Provides a scripted LLM client, a recording sleep, in-memory caches and
canned provider payloads. No network access; all I/O is faked.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from labeliq.cache.memory_store import MemoryCacheStore
from labeliq.llm.base_client import BaseLLMClient
from labeliq.llm.models import LLMResponse, Message
from labeliq.providers.retry import RetryExecutor


# === FAKES ===


class FakeLLMClient(BaseLLMClient):
    """LLM client returning scripted replies (strings or exceptions) in order."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.calls: list[list[Message]] = []

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.2,
    ) -> LLMResponse:
        self.calls.append(messages)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model="fake-model", provider="fake")

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-model"


class SleepRecorder:
    """Awaitable sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeClock:
    """Monotonic clock advanced manually (or by a paired sleep)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds


# === FIXTURES: infrastructure ===


@pytest.fixture
def cache() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def retry(sleep_recorder: SleepRecorder) -> RetryExecutor:
    """Retry executor whose backoff sleeps return immediately."""
    return RetryExecutor(max_attempts=3, timeout_s=5.0, sleep=sleep_recorder)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def mock_http(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# === FIXTURES: canned provider payloads ===


def vision_payload(text: str, confidence: float = 0.93) -> dict[str, Any]:
    if not text:
        return {"responses": [{}]}
    return {
        "responses": [
            {
                "textAnnotations": [
                    {
                        "description": text,
                        "confidence": confidence,
                        "boundingPoly": {"vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 4}]},
                    },
                    {"description": text.split(",")[0], "boundingPoly": {"vertices": []}},
                ],
                "productSearchResults": {
                    "results": [{"product": {"displayName": "Cherry Soda"}, "score": 0.71}]
                },
            }
        ]
    }


def usda_payload(description: str, calories: float = 0.0) -> dict[str, Any]:
    return {
        "totalHits": 1,
        "foods": [
            {
                "fdcId": 123456,
                "description": description,
                "dataType": "Foundation",
                "publishedDate": "2024-04-18",
                "foodNutrients": [
                    {"nutrientName": "Energy", "value": calories, "unitName": "KCAL"},
                    {"nutrientName": "Protein", "value": 0.0, "unitName": "G"},
                ],
            }
        ],
    }


ANALYSIS_JSON: dict[str, Any] = {
    "ingredients": [
        {"name": "Water", "category": "natural", "safetyScore": 100},
        {"name": "Sugar", "category": "natural", "safetyScore": 70,
         "concerns": ["High glycemic load"]},
        {"name": "Red 40", "category": "additive", "eNumber": "E129", "safetyScore": 20,
         "concerns": ["Hyperactivity in children"],
         "regulatoryStatus": {"eu": "approved", "us": "approved"}},
    ],
    "healthAssessment": {
        "overallHealthScore": 62,
        "summary": "Sweetened drink with a synthetic dye.",
        "warnings": ["Contains Red 40"],
        "positives": ["Short ingredient list"],
    },
    "recommendations": [{"type": "warning", "message": "Limit intake of artificial dyes."}],
    "overallScore": 62,
}


@pytest.fixture
def analysis_reply() -> str:
    """Model reply with narrative text around one JSON object."""
    return (
        "Here is my analysis of the label.\n\n"
        + json.dumps(ANALYSIS_JSON, indent=2)
        + "\n\nLet me know if you need anything else."
    )
