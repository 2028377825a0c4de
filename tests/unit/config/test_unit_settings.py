# tests/unit/config/test_unit_settings.py - v2
"""Tests for config/settings.py - typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from smartsaver.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_providers(self):
        s = Settings(_env_file=None)
        assert s.provider_order == ["groq", "gemini"]

    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_enabled is True
        assert s.cache_backend == "sqlite"
        assert s.cache_query_text_max_chars == 500

    def test_default_timeouts(self):
        s = Settings(_env_file=None)
        assert s.provider_timeout_s == 20.0
        assert s.provider_retry_enabled is True

    def test_default_suggestions(self):
        s = Settings(_env_file=None)
        assert s.suggestion_limit == 5
        assert s.suggestion_min_query_chars == 2


class TestSettingsValidation:
    def test_same_providers(self):
        with pytest.raises(ConfigurationError, match="must differ"):
            Settings(_env_file=None, provider_primary="groq", provider_secondary="GROQ")

    def test_provider_names_normalized(self):
        s = Settings(_env_file=None, provider_primary=" Gemini ", provider_secondary="OpenAI")
        assert s.provider_order == ["gemini", "openai"]

    def test_redis_requires_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis")

    def test_redis_with_url(self):
        s = Settings(_env_file=None, cache_backend="redis", cache_redis_url="redis://localhost:6379/0")
        assert s.cache_backend == "redis"

    def test_query_text_max_chars_positive(self):
        with pytest.raises(ConfigurationError, match="CACHE_QUERY_TEXT_MAX_CHARS"):
            Settings(_env_file=None, cache_query_text_max_chars=0)

    def test_errors_are_joined(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(
                _env_file=None, provider_secondary="groq",
                cache_backend="redis", cache_query_text_max_chars=-1,
            )
        assert str(exc_info.value).count(";") == 2

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_timeout_must_be_positive(self, timeout):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, provider_timeout_s=timeout)

    def test_invalid_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="memcached")

    def test_invalid_log_rotation(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_rotation="ten megabytes")


class TestEnvironment:
    def test_reads_env_vars(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_PRIMARY", "gemini")
        monkeypatch.setenv("PROVIDER_SECONDARY", "groq")
        monkeypatch.setenv("CACHE_BACKEND", "json")
        s = Settings(_env_file=None)
        assert s.provider_order == ["gemini", "groq"]
        assert s.cache_backend == "json"

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("GROQ_API_KEY=gsk-from-file\nLOG_FORMAT=text\n")
        s = Settings(_env_file=env_file)
        assert s.groq_api_key == "gsk-from-file"
        assert s.log_format == "text"


class TestLoadSettings:
    def test_with_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        s = load_settings(cache_root=tmp_path, similar_default_limit=3)
        assert s.cache_root == Path(tmp_path)
        assert s.similar_default_limit == 3
