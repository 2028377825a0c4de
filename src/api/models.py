# src/api/models.py - v2
"""Public API models: AnalysisRequest, AnalysisOutcome, ErrorKind."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from smartsaver.inference.models import NutritionResult

MealType = Literal["breakfast", "lunch", "dinner", "snack"]
ErrorKind = Literal["invalid_input", "analysis_unavailable", "invalid_provider_data"]

ERROR_MESSAGES: dict[str, str] = {
    "invalid_input": "Please provide an image, text, or voice description",
    "analysis_unavailable": "Food analysis is temporarily unavailable. Please try again.",
    "invalid_provider_data": "Invalid nutritional data received",
}


class AnalysisRequest(BaseModel):
    """One meal to analyze: any mix of image, free text and voice transcript."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    image_bytes: bytes | None = None
    image_mime: str | None = None
    text: str | None = None
    audio_transcript: str | None = None
    meal_type_hint: MealType | None = None
    skip_cache: bool = False

    @property
    def has_image(self) -> bool:
        return bool(self.image_bytes)

    @property
    def query_text(self) -> str:
        """Free text and transcript joined, as used for fingerprinting."""
        parts = [p.strip() for p in (self.text, self.audio_transcript) if p and p.strip()]
        return " ".join(parts)

    @property
    def is_empty(self) -> bool:
        return not self.has_image and not self.query_text


class AnalysisOutcome(BaseModel):
    """Uniform result envelope annotated with provenance."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    nutrition_result: NutritionResult | None = None
    provider_used: str | None = None
    was_cache_hit: bool = False
    error_kind: ErrorKind | None = None
    message: str | None = None
    fingerprint: str | None = None
    detail: str | None = None

    @classmethod
    def failure(
        cls, kind: ErrorKind, detail: str | None = None, **kwargs: object
    ) -> AnalysisOutcome:
        return cls(
            success=False,
            error_kind=kind,
            message=ERROR_MESSAGES[kind],
            detail=detail,
            **kwargs,  # type: ignore[arg-type]
        )
