# src/cache/models.py - v2
"""Cache domain models: CachedNutritionRecord, CacheLookupResult, CacheStats."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from smartsaver.inference.models import HealthScore

QueryType = Literal["text", "image", "combined"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CachedNutritionRecord(BaseModel):
    """One previously computed inference result, addressed by its fingerprint."""

    fingerprint: str
    query_type: QueryType
    query_text: str = ""

    food_name: str
    calories: int = Field(ge=0)
    protein: int = Field(ge=0)
    carbs: int = Field(ge=0)
    fats: int = Field(ge=0)
    fiber: int = Field(default=0, ge=0)
    portion_size: str | None = None
    portion_grams: int | None = Field(default=None, ge=0)
    health_score: HealthScore | None = None
    health_tip: str | None = None
    cooking_method: str | None = None
    cuisine_type: str | None = None

    ai_provider: str | None = None
    hit_count: int = Field(default=1, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    last_used_at: datetime = Field(default_factory=utcnow)

    def payload(self) -> dict[str, object]:
        """Nutrition fields only, without provenance bookkeeping."""
        return self.model_dump(
            exclude={
                "fingerprint",
                "query_type",
                "query_text",
                "ai_provider",
                "hit_count",
                "created_at",
                "last_used_at",
            }
        )


class CacheLookupResult(BaseModel):
    """Outcome of a fingerprint lookup.

    ``unavailable`` means the backend raised; callers treat it like a miss.
    """

    status: Literal["hit", "miss", "unavailable"] = "miss"
    record: CachedNutritionRecord | None = None
    error: str | None = None

    @property
    def hit(self) -> bool:
        return self.status == "hit" and self.record is not None


class TopFood(BaseModel):
    food_name: str
    hit_count: int


class CacheStats(BaseModel):
    """Aggregate popularity figures over every stored record."""

    record_count: int = 0
    total_hits: int = 0
    inference_calls_saved: int = 0
    by_provider: dict[str, int] = Field(default_factory=dict)
    top_foods: list[TopFood] = Field(default_factory=list)

    @classmethod
    def from_records(
        cls, records: list[CachedNutritionRecord], top_n: int = 5
    ) -> CacheStats:
        by_provider: dict[str, int] = {}
        for r in records:
            key = r.ai_provider or "unknown"
            by_provider[key] = by_provider.get(key, 0) + 1

        ranked = sorted(records, key=lambda r: (-r.hit_count, r.food_name))
        return cls(
            record_count=len(records),
            total_hits=sum(r.hit_count for r in records),
            # Every hit beyond the first write is an avoided provider call
            inference_calls_saved=sum(max(r.hit_count - 1, 0) for r in records),
            by_provider=by_provider,
            top_foods=[
                TopFood(food_name=r.food_name, hit_count=r.hit_count)
                for r in ranked[:top_n]
            ],
        )
