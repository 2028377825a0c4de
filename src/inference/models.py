# src/inference/models.py - v2
"""Provider-agnostic nutrition types: NutritionResult, FoodSuggestion, InferenceOutcome.

Providers answer in camelCase JSON (``portionGrams``, ``healthScore``...);
models accept both that and snake_case field names. Only a missing name or a
missing/unusable calorie value rejects a reply. Every other field falls back
to its default when the provider sends something off-schema.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HealthScore = Literal["excellent", "good", "moderate", "indulgent"]
Confidence = Literal["high", "medium", "low"]

HEALTH_SCORES: tuple[str, ...] = ("excellent", "good", "moderate", "indulgent")
CONFIDENCE_LEVELS: tuple[str, ...] = ("high", "medium", "low")


def _as_number(value: Any) -> float | None:
    """Numeric value of ``value``, or None when it is not a usable number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or value != value:  # NaN
        return None
    return value


def _coerce_amount(value: Any, default: int | None = None) -> Any:
    """Round to whole units; unusable values become ``default``."""
    number = _as_number(value)
    if number is None:
        if default is None:
            raise ValueError(f"expected a number, got {value!r}")
        return default
    if number < 0:
        raise ValueError("amount must be non-negative")
    return int(round(number))


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


class _NutrientFields(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    name: str
    calories: int
    protein: int = 0
    carbs: int = 0
    fats: int = 0
    fiber: int = 0

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("name must be a non-empty string")
        return v.strip()

    @field_validator("calories", mode="before")
    @classmethod
    def validate_calories(cls, v: Any) -> int:
        return _coerce_amount(v)

    @field_validator("protein", "carbs", "fats", "fiber", mode="before")
    @classmethod
    def validate_macro(cls, v: Any) -> int:
        return _coerce_amount(v, default=0)


class NutritionResult(_NutrientFields):
    """The shape both fresh inferences and cache hits are coerced into."""

    portion_size: str = "medium"
    portion_grams: int = 100
    health_score: HealthScore = "good"
    health_tip: str = ""
    cooking_method: str | None = None
    cuisine_type: str | None = None
    confidence: Confidence = "medium"
    alternative_names: list[str] | None = None

    @field_validator("portion_grams", mode="before")
    @classmethod
    def validate_portion_grams(cls, v: Any) -> int:
        return _coerce_amount(v, default=100)

    @field_validator("portion_size", mode="before")
    @classmethod
    def validate_portion_size(cls, v: Any) -> str:
        if v is None or isinstance(v, (dict, list)):
            return "medium"
        return str(v).strip() or "medium"

    @field_validator("health_tip", mode="before")
    @classmethod
    def validate_health_tip(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("cooking_method", "cuisine_type", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> str | None:
        if v is None or isinstance(v, (dict, list)):
            return None
        return str(v)

    @field_validator("health_score", mode="before")
    @classmethod
    def validate_health_score(cls, v: Any) -> str:
        return _choice(v, HEALTH_SCORES, "good")

    @field_validator("confidence", mode="before")
    @classmethod
    def validate_confidence(cls, v: Any) -> str:
        return _choice(v, CONFIDENCE_LEVELS, "medium")

    @field_validator("alternative_names", mode="before")
    @classmethod
    def validate_alternative_names(cls, v: Any) -> list[str] | None:
        if isinstance(v, str):
            return [v.strip()] if v.strip() else None
        if isinstance(v, (list, tuple)):
            return [str(n).strip() for n in v if n is not None and str(n).strip()]
        return None


class FoodSuggestion(_NutrientFields):
    """Lightweight search suggestion; never persisted."""

    portion_description: str = ""
    health_score: HealthScore = "good"

    @field_validator("portion_description", mode="before")
    @classmethod
    def validate_portion_description(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("health_score", mode="before")
    @classmethod
    def validate_health_score(cls, v: Any) -> str:
        return _choice(v, HEALTH_SCORES, "good")


class InferenceOutcome(BaseModel):
    """Result of one run of the provider chain.

    On success ``payload`` holds the parsed JSON and ``provider`` the backend
    that answered. On failure ``errors`` holds one entry per provider tried.
    """

    success: bool
    payload: Any = None
    provider: str | None = None
    errors: list[str] = Field(default_factory=list)

    @property
    def error_message(self) -> str:
        if not self.errors:
            return ""
        return "All AI providers failed. " + ". ".join(self.errors)
