# src/llm/client_factory.py - v3
"""Factory: instantiate an inference client from a provider name.

Clients are built once per chain and handed to it explicitly, so tests can
substitute their own BaseLLMClient doubles.
"""

from __future__ import annotations

import logging

from smartsaver.config.settings import Settings
from smartsaver.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name -> adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "groq": "smartsaver.llm.adapters.openai_adapter.OpenAICompatAdapter",
    "openai": "smartsaver.llm.adapters.openai_adapter.OpenAICompatAdapter",
    "gemini": "smartsaver.llm.adapters.google_adapter.GoogleAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (groq, gemini, openai).
        settings: Application settings (API keys, models, timeouts).
        **kwargs: Overrides passed straight to the adapter.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported inference provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])
    init_kwargs = dict(kwargs)
    settings = settings or Settings()

    if provider == "groq":
        init_kwargs.setdefault("provider_name", "groq")
        init_kwargs.setdefault("api_key", settings.groq_api_key)
        init_kwargs.setdefault("base_url", settings.groq_base_url)
        init_kwargs.setdefault("model", settings.groq_text_model)
        init_kwargs.setdefault("vision_model", settings.groq_vision_model)
        init_kwargs.setdefault("timeout_s", settings.provider_timeout_s)
    elif provider == "openai":
        init_kwargs.setdefault("provider_name", "openai")
        init_kwargs.setdefault("api_key", settings.openai_api_key)
        init_kwargs.setdefault("model", settings.openai_model)
        init_kwargs.setdefault("timeout_s", settings.provider_timeout_s)
    elif provider == "gemini":
        init_kwargs.setdefault("api_key", settings.gemini_api_key)
        init_kwargs.setdefault("model", settings.gemini_model)

    logger.debug("Creating inference client: provider=%s", provider)
    return adapter_cls(**init_kwargs)


def create_provider_clients(settings: Settings) -> list[BaseLLMClient]:
    """Clients for the configured chain, primary first."""
    return [create_llm_client(p, settings) for p in settings.provider_order]


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered inference provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, class_name)
