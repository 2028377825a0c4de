# tests/conftest.py - v2
"""Shared test fixtures for unit and integration tests.

Provides stub inference clients, sample provider payloads, settings and
temp-dir cache stores. No network I/O: every provider is a stub.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from smartsaver.cache.json_store import JsonCacheStore
from smartsaver.cache.models import CachedNutritionRecord
from smartsaver.cache.sqlite_store import SqliteCacheStore
from smartsaver.config.settings import Settings
from smartsaver.llm.base_client import BaseLLMClient
from smartsaver.llm.models import ImageInput, LLMResponse, Message


class StubLLMClient(BaseLLMClient):
    """Scripted client: returns ``reply`` or raises ``error`` on every call."""

    def __init__(
        self,
        name: str,
        reply: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self._name = name
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        return self._respond(messages, system, images=[])

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        return self._respond(messages, system, images=images)

    def _respond(self, messages, system, images) -> LLMResponse:
        self.calls.append({"messages": messages, "system": system, "images": images})
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply or "", model="stub", provider=self._name)

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.calls)


# === FIXTURES: Sample data ===


@pytest.fixture
def idli_payload() -> dict[str, Any]:
    return {
        "name": "Idli",
        "calories": 39,
        "protein": 2,
        "carbs": 8,
        "fats": 0,
        "fiber": 1,
        "portionSize": "medium",
        "portionGrams": 30,
        "healthScore": "excellent",
        "healthTip": "Pair with sambar for extra protein",
        "confidence": "high",
    }


@pytest.fixture
def idli_json(idli_payload) -> str:
    return json.dumps(idli_payload)


def make_record(
    fingerprint: str = "fp_001",
    food_name: str = "Dal Makhani",
    query_text: str | None = None,
    **overrides: Any,
) -> CachedNutritionRecord:
    data: dict[str, Any] = dict(
        fingerprint=fingerprint,
        query_type="text",
        query_text=query_text if query_text is not None else food_name.lower(),
        food_name=food_name,
        calories=350,
        protein=12,
        carbs=30,
        fats=18,
        fiber=6,
        portion_size="medium",
        portion_grams=250,
        health_score="moderate",
        health_tip="Go easy on the butter",
        cuisine_type="North Indian",
        ai_provider="groq",
    )
    data.update(overrides)
    return CachedNutritionRecord(**data)


# === FIXTURES: Settings and stores ===


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, cache_backend="json", cache_root=tmp_path / "cache")


@pytest.fixture
def json_store(tmp_path) -> JsonCacheStore:
    return JsonCacheStore(cache_root=tmp_path / "json_cache")


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteCacheStore(db_path=tmp_path / "cache.db")
    yield store
    store.close()


@pytest.fixture(params=["json", "sqlite"])
def any_store(request, tmp_path):
    """Both file-backed stores, for contract tests."""
    if request.param == "json":
        store = JsonCacheStore(cache_root=tmp_path / "json_cache")
    else:
        store = SqliteCacheStore(db_path=tmp_path / "cache.db")
    yield store
    store.close()


@pytest.fixture
def record_factory():
    """Build CachedNutritionRecord instances with sensible defaults."""
    return make_record


@pytest.fixture
def stub_client():
    """Factory for StubLLMClient(name, reply=..., error=...)."""
    return StubLLMClient
