# src/llm/base_client.py - v2
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from smartsaver.llm.models import ImageInput, LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all inference providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        """Text completion."""

    @abstractmethod
    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> LLMResponse:
        """Vision-enabled completion (images + text)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (groq, gemini, openai)."""

    async def invoke(
        self,
        system: str,
        user: str,
        image: ImageInput | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> str:
        """Single-turn call returning the raw reply text."""
        messages = [Message(role="user", content=user)]
        if image is not None:
            response = await self.complete_with_vision(
                messages, [image], system=system,
                max_tokens=max_tokens, temperature=temperature,
            )
        else:
            response = await self.complete(
                messages, system=system,
                max_tokens=max_tokens, temperature=temperature,
            )
        return response.content

    async def aclose(self) -> None:
        """Release network resources held by the underlying SDK client."""
