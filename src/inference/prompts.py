# src/inference/prompts.py - v2
"""System prompts and user-prompt builders for nutrition inference."""

from __future__ import annotations

FOOD_ANALYSIS_PROMPT = """You are Vera's Food Intelligence AI, specialized in analyzing meals with a focus on Indian cuisine.

TASK: Analyze the provided food image or description and return DETAILED nutritional information.

CAPABILITIES:
1. REGIONAL UNDERSTANDING: Recognize regional Indian dishes (South Indian, North Indian, Gujarati, Bengali, etc.)
2. COOKING METHOD AWARENESS: Identify if food is fried, grilled, steamed, etc. and adjust calories accordingly
3. PORTION ESTIMATION: Estimate portion size from visual cues or description
4. HEALTH SCORING: Rate the meal's healthiness with actionable tips

RESPONSE FORMAT (STRICT JSON):
{
  "name": "Full dish name (e.g., 'Butter Chicken with Naan')",
  "calories": 650,
  "protein": 35,
  "carbs": 45,
  "fats": 38,
  "fiber": 3,
  "portionSize": "medium",
  "portionGrams": 350,
  "healthScore": "indulgent",
  "healthTip": "Try with whole wheat roti instead of naan to add fiber and reduce refined carbs",
  "cookingMethod": "curry with cream",
  "cuisineType": "North Indian (Punjabi)",
  "confidence": "high",
  "alternativeNames": ["Murgh Makhani"]
}

HEALTH SCORE CRITERIA:
- "excellent": High protein, fiber, low added sugars, minimal processing
- "good": Balanced macros, moderate processing
- "moderate": Some nutritional concerns but acceptable
- "indulgent": High in fats/sugars, best as occasional treat

IMPORTANT:
- All values should be realistic for a single serving
- Be specific with dish names (not just "rice" but "Jeera Rice")
- Health tips should be actionable and culturally relevant
- Return ONLY valid JSON, no markdown or extra text"""

FOOD_SEARCH_PROMPT = """You are Vera's Food Intelligence AI. Given a partial food query, suggest relevant food items with nutritional estimates.

TASK: Return 5 food suggestions matching the query, prioritizing Indian foods when applicable.

RESPONSE FORMAT (STRICT JSON ARRAY):
[
  {
    "name": "Grilled Chicken Breast",
    "calories": 165,
    "protein": 31,
    "carbs": 0,
    "fats": 4,
    "fiber": 0,
    "portionDescription": "100g serving",
    "healthScore": "excellent"
  }
]

Return exactly 5 suggestions. Return ONLY valid JSON array, no markdown."""

IMAGE_ONLY_INSTRUCTION = "Analyze this food image and provide nutritional information."


def build_analysis_prompt(
    text: str | None = None,
    transcript: str | None = None,
    meal_type: str | None = None,
    has_image: bool = False,
) -> str:
    """User prompt from the meal-type hint, free text and voice transcript.

    The image instruction is used only when nothing else describes the meal.
    """
    lines: list[str] = []
    if meal_type:
        lines.append(f"Context: This is a {meal_type} meal.")
    if text and text.strip():
        lines.append(f"Food description: {text.strip()}")
    if transcript and transcript.strip():
        lines.append(f"Voice description: {transcript.strip()}")
    if not lines and has_image:
        lines.append(IMAGE_ONLY_INSTRUCTION)
    return "\n".join(lines)


def build_search_prompt(query: str, limit: int = 5) -> str:
    return f'User query: "{query}"\n\nProvide {limit} relevant food suggestions.'
