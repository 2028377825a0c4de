# src/llm/adapters/openai_adapter.py - v2
"""OpenAI-compatible chat adapter implementing BaseLLMClient.

Uses the official openai SDK. Groq exposes an OpenAI-compatible endpoint, so
the same adapter serves both: pass ``base_url`` and ``provider_name="groq"``.
Text-only prompts go to ``model``; prompts with an image go to
``vision_model`` when one is configured.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from smartsaver.llm.base_client import BaseLLMClient
from smartsaver.llm.models import ImageInput, LLMResponse, Message

logger = logging.getLogger(__name__)


class OpenAICompatAdapter(BaseLLMClient):
    """Chat-completions adapter for OpenAI and OpenAI-compatible APIs."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str = "",
        base_url: str | None = None,
        vision_model: str | None = None,
        provider_name: str = "openai",
        timeout_s: float | None = None,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._vision_model = vision_model or model
        self._api_key = api_key
        self._base_url = base_url
        self._provider_name = provider_name
        self._timeout_s = timeout_s
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init SDK client (only on first API call)."""
        if self.__client is None:
            try:
                import openai
            except ImportError as e:
                raise ImportError(
                    "openai package required: pip install openai"
                ) from e
            kwargs: dict[str, Any] = {"api_key": self._api_key or "missing", "max_retries": 0}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            if self._timeout_s is not None:
                kwargs["timeout"] = self._timeout_s
            self.__client = openai.AsyncOpenAI(**kwargs)
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})

        return await self._create(self._model, oai_messages, max_tokens, temperature)

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        # Vision models on Groq reject a separate system turn: fold it into the text
        content_parts: list[dict[str, Any]] = []
        texts = [m.content for m in messages]
        if system:
            texts.insert(0, system)
        content_parts.append({"type": "text", "text": "\n\n".join(texts)})
        for img in images:
            content_parts.append({
                "type": "image_url",
                "image_url": {"url": img.data_url()},
            })
        oai_messages = [{"role": "user", "content": content_parts}]

        return await self._create(
            self._vision_model, oai_messages, max_tokens, temperature
        )

    async def _create(
        self,
        model: str,
        oai_messages: list[dict[str, Any]],
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(
            model=model,
            messages=oai_messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        latency = int((time.monotonic() - t0) * 1000)

        if not resp.choices:
            raise ValueError(f"Empty response from {self._provider_name}")
        content = resp.choices[0].message.content
        if not content:
            raise ValueError(f"Empty response from {self._provider_name}")

        usage = resp.usage
        return LLMResponse(
            content=content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=model,
            provider=self._provider_name,
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return self._provider_name

    async def aclose(self) -> None:
        if self.__client is not None:
            await self.__client.close()
            self.__client = None
