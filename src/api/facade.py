# src/api/facade.py - v2
"""Public API facade: the Smart Saver analysis orchestrator.

Usage:
    saver = SmartSaver.from_settings(load_settings())
    outcome = await saver.analyze(AnalysisRequest(text="2 idli with sambar"))

One ``analyze`` call runs the whole cycle:
  1. Reject requests with no image, text or transcript
  2. Fingerprint the query (text, image or combined)
  3. Serve from the cache unless ``skip_cache`` is set
  4. On a miss, build the prompt and run the provider chain
  5. Validate the reply into a NutritionResult
  6. Persist it under the fingerprint from step 2
  7. Return the result tagged with the provider that answered

Every path returns an AnalysisOutcome; nothing raises to the caller.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from pydantic import ValidationError

from smartsaver.api.models import AnalysisOutcome, AnalysisRequest, MealType
from smartsaver.cache.base_cache_store import BaseCacheStore
from smartsaver.cache.fingerprint import compute_fingerprint, normalize_text
from smartsaver.cache.models import CachedNutritionRecord, QueryType
from smartsaver.config.settings import Settings
from smartsaver.inference.chain import ProviderChain, retry_configs_for
from smartsaver.inference.models import FoodSuggestion, NutritionResult
from smartsaver.inference.prompts import (
    FOOD_ANALYSIS_PROMPT,
    FOOD_SEARCH_PROMPT,
    build_analysis_prompt,
    build_search_prompt,
)
from smartsaver.llm.models import ImageInput
from smartsaver.logging.context import clear_context, set_request_context

logger = logging.getLogger(__name__)

_DEFAULT_IMAGE_MIME = "image/jpeg"


class SmartSaver:
    """Cache-first nutrition analysis over an ordered provider chain."""

    def __init__(
        self,
        chain: ProviderChain,
        cache_store: BaseCacheStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._chain = chain
        self._settings = settings or Settings()
        enabled = self._settings.cache_enabled
        self._cache = cache_store if enabled else None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> SmartSaver:
        """Wire provider clients and the cache backend from configuration."""
        from smartsaver.cache.cache_factory import create_cache_store
        from smartsaver.llm.client_factory import create_provider_clients

        settings = settings or Settings()
        chain = ProviderChain(
            create_provider_clients(settings),
            timeout_s=settings.provider_timeout_s,
            retry_configs=retry_configs_for(settings.provider_retry_enabled),
            temperature=settings.llm_temperature,
        )
        cache_store = create_cache_store(settings) if settings.cache_enabled else None
        return cls(chain=chain, cache_store=cache_store, settings=settings)

    # --- Analysis ---

    async def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        """Analyze one meal; see module docstring for the cycle."""
        if request.is_empty:
            logger.info("Rejected analysis request with no content")
            return AnalysisOutcome.failure("invalid_input")

        query_text = request.query_text
        fingerprint, query_type = compute_fingerprint(
            query_text, request.image_bytes
        )
        set_request_context(uuid.uuid4().hex[:12], fingerprint)
        try:
            return await self._analyze(request, query_text, fingerprint, query_type)
        except Exception as e:
            logger.exception("Food analysis error: %s", e)
            return AnalysisOutcome.failure(
                "analysis_unavailable", detail=str(e), fingerprint=fingerprint
            )
        finally:
            clear_context()

    async def _analyze(
        self,
        request: AnalysisRequest,
        query_text: str,
        fingerprint: str,
        query_type: QueryType,
    ) -> AnalysisOutcome:
        if self._cache is not None and not request.skip_cache:
            lookup = await self._cache.lookup(fingerprint)
            if lookup.hit and lookup.record is not None:
                logger.info("Cache HIT for %s", fingerprint[:8])
                return AnalysisOutcome(
                    success=True,
                    nutrition_result=cached_to_nutrition(lookup.record),
                    provider_used=lookup.record.ai_provider,
                    was_cache_hit=True,
                    fingerprint=fingerprint,
                )
            logger.info("Cache %s for %s, calling AI", lookup.status.upper(), fingerprint[:8])

        prompt = build_analysis_prompt(
            text=request.text,
            transcript=request.audio_transcript,
            meal_type=request.meal_type_hint,
            has_image=request.has_image,
        )
        image = None
        if request.image_bytes:
            image = ImageInput(
                data=request.image_bytes,
                media_type=request.image_mime or _DEFAULT_IMAGE_MIME,
            )

        outcome = await self._chain.infer(
            FOOD_ANALYSIS_PROMPT,
            prompt,
            image=image,
            expect=dict,
            max_tokens=self._settings.llm_max_tokens,
        )
        if not outcome.success:
            return AnalysisOutcome.failure(
                "analysis_unavailable",
                detail=outcome.error_message,
                fingerprint=fingerprint,
            )

        try:
            result = NutritionResult.model_validate(outcome.payload)
        except ValidationError as e:
            logger.warning(
                "Invalid nutritional data from %s: %s",
                outcome.provider, e.errors(include_url=False),
            )
            return AnalysisOutcome.failure(
                "invalid_provider_data",
                detail=str(e),
                provider_used=outcome.provider,
                fingerprint=fingerprint,
            )

        if self._cache is not None:
            record = record_from_result(
                fingerprint,
                query_type,
                query_text or result.name,
                result,
                outcome.provider,
                max_chars=self._settings.cache_query_text_max_chars,
            )
            await self._cache.put(fingerprint, record)

        return AnalysisOutcome(
            success=True,
            nutrition_result=result,
            provider_used=outcome.provider,
            was_cache_hit=False,
            fingerprint=fingerprint,
        )

    async def quick_analyze(self, text: str) -> AnalysisOutcome:
        return await self.analyze(AnalysisRequest(text=text))

    # --- Suggestions ---

    async def search_suggestions(self, query: str) -> list[FoodSuggestion]:
        """AI suggestions for a partial query; never touches the cache."""
        query = (query or "").strip()
        if len(query) < self._settings.suggestion_min_query_chars:
            return []

        limit = self._settings.suggestion_limit
        outcome = await self._chain.infer(
            FOOD_SEARCH_PROMPT,
            build_search_prompt(query, limit),
            expect=list,
            max_tokens=self._settings.search_max_tokens,
        )
        if not outcome.success:
            logger.warning("Food search failed: %s", outcome.error_message)
            return []

        suggestions: list[FoodSuggestion] = []
        for item in outcome.payload:
            try:
                suggestions.append(FoodSuggestion.model_validate(item))
            except ValidationError:
                logger.debug("Dropping malformed suggestion: %r", item)
        return suggestions[:limit]

    async def quick_suggestions(
        self, meal_type: MealType | None = None, now: datetime | None = None
    ) -> list[FoodSuggestion]:
        """Popular items for a meal, derived from the time of day if not given."""
        meal = meal_type or meal_type_for_hour((now or datetime.now()).hour)
        return await self.search_suggestions(f"Popular {meal} items in India")

    async def similar_cached(
        self, query: str, limit: int | None = None
    ) -> list[FoodSuggestion]:
        """Suggestions drawn from previously analyzed foods, most popular first."""
        if self._cache is None:
            return []
        limit = self._settings.similar_default_limit if limit is None else limit
        records = await self._cache.find_similar(query, limit)
        return [record_to_suggestion(r) for r in records]

    async def aclose(self) -> None:
        await self._chain.aclose()
        if self._cache is not None:
            self._cache.close()


def meal_type_for_hour(hour: int) -> MealType:
    if 5 <= hour < 11:
        return "breakfast"
    if 11 <= hour < 15:
        return "lunch"
    if 15 <= hour < 18:
        return "snack"
    return "dinner"


def cached_to_nutrition(record: CachedNutritionRecord) -> NutritionResult:
    """Coerce a cached record into a NutritionResult; cache hits are high confidence."""
    return NutritionResult(
        name=record.food_name,
        calories=record.calories,
        protein=record.protein,
        carbs=record.carbs,
        fats=record.fats,
        fiber=record.fiber,
        portion_size=record.portion_size,
        portion_grams=record.portion_grams,
        health_score=record.health_score,
        health_tip=record.health_tip,
        cooking_method=record.cooking_method,
        cuisine_type=record.cuisine_type,
        confidence="high",
    )


def record_from_result(
    fingerprint: str,
    query_type: QueryType,
    query_text: str,
    result: NutritionResult,
    provider: str | None,
    max_chars: int = 500,
) -> CachedNutritionRecord:
    return CachedNutritionRecord(
        fingerprint=fingerprint,
        query_type=query_type,
        query_text=normalize_text(query_text)[:max_chars],
        food_name=result.name,
        calories=result.calories,
        protein=result.protein,
        carbs=result.carbs,
        fats=result.fats,
        fiber=result.fiber,
        portion_size=result.portion_size,
        portion_grams=result.portion_grams,
        health_score=result.health_score,
        health_tip=result.health_tip,
        cooking_method=result.cooking_method,
        cuisine_type=result.cuisine_type,
        ai_provider=provider,
    )


def record_to_suggestion(record: CachedNutritionRecord) -> FoodSuggestion:
    portion = record.portion_size or ""
    if record.portion_grams:
        portion = f"{portion} ({record.portion_grams}g)".strip()
    return FoodSuggestion(
        name=record.food_name,
        calories=record.calories,
        protein=record.protein,
        carbs=record.carbs,
        fats=record.fats,
        fiber=record.fiber,
        portion_description=portion,
        health_score=record.health_score or "good",
    )
