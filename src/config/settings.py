# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider credentials, cache backend selection,
timeouts and logging. Cross-field rules are enforced in
``validate_config_consistency``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === INFERENCE PROVIDERS ===
    # Chain order: primary first, secondary on any failure.
    provider_primary: str = "groq"
    provider_secondary: str = "gemini"

    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_text_model: str = "llama-3.3-70b-versatile"
    groq_vision_model: str = "llama-3.2-90b-vision-preview"

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    llm_temperature: float = 0.3
    llm_max_tokens: int = 2048
    search_max_tokens: int = 1024

    # === Fault tolerance ===
    provider_timeout_s: float = 20.0
    provider_retry_enabled: bool = True

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["json", "sqlite", "redis"] = "sqlite"
    cache_root: Path = Path("~/.smartsaver/cache")
    cache_redis_url: str = ""
    cache_query_text_max_chars: int = 500
    similar_default_limit: int = 5

    # === Suggestions ===
    suggestion_limit: int = 5
    suggestion_min_query_chars: int = 2

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("provider_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:  # noqa: N805
        """Provider calls must always be bounded."""
        if v <= 0:
            raise ValueError("provider_timeout_s must be > 0")
        return v

    @field_validator("log_rotation")
    @classmethod
    def validate_log_rotation(cls, v: str) -> str:  # noqa: N805
        from smartsaver.logging.logger import parse_size

        parse_size(v)
        return v

    @field_validator("provider_primary", "provider_secondary")
    @classmethod
    def normalize_provider(cls, v: str) -> str:  # noqa: N805
        return v.strip().lower()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.provider_primary == self.provider_secondary:
            errors.append(
                "PROVIDER_PRIMARY and PROVIDER_SECONDARY must differ"
            )

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if self.cache_query_text_max_chars <= 0:
            errors.append("CACHE_QUERY_TEXT_MAX_CHARS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def provider_order(self) -> list[str]:
        """Providers in the order the inference chain tries them."""
        return [self.provider_primary, self.provider_secondary]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
