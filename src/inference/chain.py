# src/inference/chain.py - v1
"""Ordered provider chain: try each inference backend until one answers.

The chain is statically ordered (primary, then secondary). Any failure of a
provider (SDK error, timeout, empty body, unparsable or wrongly shaped JSON)
is logged and the next provider gets the same input. Only when every
provider failed does the chain report failure, with all causes aggregated.
"""

from __future__ import annotations

import logging

from smartsaver.inference.models import InferenceOutcome
from smartsaver.llm.base_client import BaseLLMClient
from smartsaver.llm.models import ImageInput
from smartsaver.llm.response_parser import parse_json_response
from smartsaver.llm.retry import NO_RETRY, RetryConfig, with_retry
from smartsaver.logging.context import set_provider_context

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """One provider failed; the chain recovers by moving to the next."""

    def __init__(self, provider: str, cause: Exception):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider}: {cause}")


class ProviderChain:
    """Primary/secondary failover over injected BaseLLMClient instances."""

    def __init__(
        self,
        clients: list[BaseLLMClient],
        timeout_s: float = 20.0,
        retry_configs: dict[str, RetryConfig] | None = None,
        temperature: float = 0.3,
    ) -> None:
        if not clients:
            raise ValueError("ProviderChain requires at least one client")
        self._clients = list(clients)
        self._timeout_s = timeout_s
        self._retry_configs = retry_configs
        self._temperature = temperature

    @property
    def provider_names(self) -> list[str]:
        return [c.provider_name for c in self._clients]

    async def infer(
        self,
        system: str,
        user: str,
        image: ImageInput | None = None,
        expect: type = dict,
        max_tokens: int = 2048,
    ) -> InferenceOutcome:
        """Run the chain and return the first successfully parsed reply."""
        errors: list[str] = []
        try:
            for index, client in enumerate(self._clients):
                name = client.provider_name
                set_provider_context(name)
                role = "primary" if index == 0 else "fallback"
                logger.info("Attempting analysis with %s (%s)", name, role)
                try:
                    payload = await self._attempt(
                        client, system, user, image, expect, max_tokens
                    )
                except ProviderError as e:
                    logger.warning("%s failed: %s", name, e.cause)
                    errors.append(f"{name}: {e.cause}")
                    continue
                logger.info("%s analysis successful", name)
                return InferenceOutcome(success=True, payload=payload, provider=name)
        finally:
            set_provider_context(None)

        logger.error("All AI providers failed (%s)", ", ".join(self.provider_names))
        return InferenceOutcome(success=False, errors=errors)

    async def _attempt(
        self,
        client: BaseLLMClient,
        system: str,
        user: str,
        image: ImageInput | None,
        expect: type,
        max_tokens: int,
    ) -> object:
        try:
            raw = await with_retry(
                client.invoke,
                system,
                user,
                image,
                max_tokens=max_tokens,
                temperature=self._temperature,
                provider=client.provider_name,
                retry_configs=self._retry_configs,
                timeout_s=self._timeout_s,
            )
            return parse_json_response(raw, expect=expect)
        except Exception as e:
            cause = getattr(e, "last_error", e)
            raise ProviderError(client.provider_name, cause) from e

    async def aclose(self) -> None:
        for client in self._clients:
            await client.aclose()


def retry_configs_for(enabled: bool) -> dict[str, RetryConfig] | None:
    """Default transient-error retries, or none at all."""
    return None if enabled else NO_RETRY
