# tests/unit/llm/test_unit_client_factory.py - v3
"""Tests for llm/client_factory.py."""

from __future__ import annotations

import pytest

from smartsaver.config.settings import Settings
from smartsaver.llm import client_factory
from smartsaver.llm.adapters.google_adapter import GoogleAdapter
from smartsaver.llm.adapters.openai_adapter import OpenAICompatAdapter
from smartsaver.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
    create_provider_clients,
    register_provider,
)


@pytest.fixture
def factory_settings() -> Settings:
    return Settings(
        _env_file=None,
        groq_api_key="gsk-test",
        gemini_api_key="gm-test",
        openai_api_key="sk-test",
        provider_timeout_s=7.5,
    )


class TestCreateLLMClient:
    def test_groq(self, factory_settings):
        client = create_llm_client("groq", factory_settings)
        assert isinstance(client, OpenAICompatAdapter)
        assert client.provider_name == "groq"
        assert client._base_url == factory_settings.groq_base_url
        assert client._model == factory_settings.groq_text_model
        assert client._vision_model == factory_settings.groq_vision_model
        assert client._timeout_s == 7.5

    def test_openai(self, factory_settings):
        client = create_llm_client("openai", factory_settings)
        assert isinstance(client, OpenAICompatAdapter)
        assert client.provider_name == "openai"
        assert client._base_url is None
        assert client._vision_model == factory_settings.openai_model

    def test_gemini(self, factory_settings):
        client = create_llm_client("gemini", factory_settings)
        assert isinstance(client, GoogleAdapter)
        assert client.provider_name == "gemini"
        assert client._api_key == "gm-test"

    def test_overrides_win(self, factory_settings):
        client = create_llm_client("groq", factory_settings, model="custom-model")
        assert client._model == "custom-model"

    def test_unsupported(self, factory_settings):
        with pytest.raises(UnsupportedProviderError, match="Available"):
            create_llm_client("nonexistent", factory_settings)


class TestCreateProviderClients:
    def test_order_follows_settings(self, factory_settings):
        clients = create_provider_clients(factory_settings)
        assert [c.provider_name for c in clients] == ["groq", "gemini"]

    def test_swapped_order(self):
        s = Settings(_env_file=None, provider_primary="gemini", provider_secondary="groq")
        assert [c.provider_name for c in create_provider_clients(s)] == ["gemini", "groq"]


class TestRegisterProvider:
    def test_register_custom(self, monkeypatch, factory_settings):
        monkeypatch.setattr(
            client_factory, "_PROVIDER_REGISTRY", dict(client_factory._PROVIDER_REGISTRY)
        )
        register_provider(
            "local", "smartsaver.llm.adapters.openai_adapter.OpenAICompatAdapter"
        )
        client = create_llm_client("local", factory_settings, provider_name="local")
        assert client.provider_name == "local"
