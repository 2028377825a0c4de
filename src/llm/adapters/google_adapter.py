# src/llm/adapters/google_adapter.py - v2
"""Google Gemini adapter implementing BaseLLMClient.

Uses google-generativeai SDK. Safety filters are relaxed because food
descriptions trip them needlessly (e.g. "killer biryani").
"""

from __future__ import annotations

import time
from typing import Any

from smartsaver.llm.base_client import BaseLLMClient
from smartsaver.llm.models import ImageInput, LLMResponse, Message

_SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: str = "",
        top_p: float = 0.8,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._top_p = top_p

    def _generative_model(self, system: str | None) -> Any:
        try:
            import google.generativeai as genai
        except ImportError as e:
            raise ImportError(
                "google-generativeai package required: pip install google-generativeai"
            ) from e

        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(
            self._model,
            system_instruction=system,
            safety_settings=[
                {"category": c, "threshold": "BLOCK_NONE"} for c in _SAFETY_CATEGORIES
            ],
        )

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        contents = []
        for m in messages:
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.content}]})

        return await self._generate(system, contents, max_tokens, temperature)

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        parts: list[dict[str, Any]] = []
        for m in messages:
            parts.append({"text": m.content})
        for img in images:
            parts.append({"inline_data": {"mime_type": img.media_type, "data": img.data}})

        return await self._generate(system, parts, max_tokens, temperature)

    async def _generate(
        self,
        system: str | None,
        contents: Any,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        model = self._generative_model(system)
        t0 = time.monotonic()
        resp = await model.generate_content_async(
            contents,
            generation_config={
                "max_output_tokens": max_tokens,
                "temperature": temperature,
                "top_p": self._top_p,
            },
        )
        latency = int((time.monotonic() - t0) * 1000)

        text = resp.text
        if not text:
            raise ValueError("Empty response from gemini")

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=text,
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="gemini",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "gemini"
