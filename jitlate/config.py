"""
Translation configuration.

Two layers:
- TranslationConfig (and its nested models) describe one Translator.
- Settings loads the same values from environment variables / .env.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jitlate.core.errors import ConfigurationError
from jitlate.core.models import TranslationStyle


EXCLUDED_TEXT_ENV = "JITLATE_EXCLUDED_TEXT"


# =============================================================================
# Translator Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Which backend to translate with."""

    # "openai", "gemini"/"google", "anthropic"; anything else is a mock
    type: str = "openai"
    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None
    timeout: float = 60.0  # seconds


class CacheConfig(BaseModel):
    """Where translations are cached."""

    # "memory" or "redis" (alias "networked")
    type: str = "memory"
    ttl_seconds: int | None = 3600  # <= 0 or None: never expire
    connection_string: str | None = None
    key_prefix: str = "jitlate:"
    max_entries: int | None = 10_000  # In-memory only


class TranslationConfig(BaseModel):
    """Everything a Translator needs."""

    target_language: str
    source_language: str = "en"
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    excluded_terms: list[str] = Field(default_factory=list)
    translation_context: str | None = None
    glossary: dict[str, str] = Field(default_factory=dict)
    style: TranslationStyle = TranslationStyle.NEUTRAL

    # Coalescer debounce window and streaming buffer window, in seconds
    batch_delay: float = 0.05
    stream_buffer: float = 1.0

    @field_validator("target_language", "source_language")
    @classmethod
    def _non_empty_language(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ConfigurationError("language code must not be empty")
        return value

    @field_validator("batch_delay", "stream_buffer")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ConfigurationError("delay must not be negative")
        return value


def merge_excluded_terms(
    configured: Iterable[str],
    env_value: str | None = None,
) -> list[str]:
    """
    Combine configured excluded terms with the comma-separated env list.

    Terms are trimmed, empties dropped, duplicates removed (first wins).
    """
    if env_value is None:
        env_value = os.getenv(EXCLUDED_TEXT_ENV, "")
    env_terms = env_value.split(",") if env_value else []

    merged: list[str] = []
    for term in [*configured, *env_terms]:
        term = term.strip()
        if term and term not in merged:
            merged.append(term)
    return merged


# =============================================================================
# Environment Settings
# =============================================================================


class Settings(BaseSettings):
    """Settings loaded from environment (JITLATE_* variables)."""

    model_config = SettingsConfigDict(
        env_prefix="JITLATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Languages
    # ==========================================================================

    target_language: str = "es"
    source_language: str = "en"

    # ==========================================================================
    # Provider
    # ==========================================================================

    provider_type: str = "openai"
    provider_api_key: str = ""
    provider_model: str = ""
    provider_base_url: str = ""
    provider_timeout: float = 60.0

    # ==========================================================================
    # Cache
    # ==========================================================================

    cache_type: str = "memory"
    cache_ttl_seconds: int = 3600
    cache_url: str = ""
    cache_key_prefix: str = "jitlate:"
    cache_max_entries: int = 10_000

    # ==========================================================================
    # Translation Hints
    # ==========================================================================

    translation_context: str = ""
    style: TranslationStyle = TranslationStyle.NEUTRAL
    excluded_terms: str = ""  # Comma-separated
    glossary: dict[str, str] = {}  # JSON object, e.g. {"Checkout": "Caisse"}

    # ==========================================================================
    # HTTP API
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    max_texts: int = 100
    max_total_chars: int = 100_000
    max_html_chars: int = 500_000

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def translation_config(self, target_language: str | None = None) -> TranslationConfig:
        """Build a TranslationConfig from these settings."""
        return TranslationConfig(
            target_language=target_language or self.target_language,
            source_language=self.source_language,
            provider=ProviderConfig(
                type=self.provider_type,
                api_key=self.provider_api_key or None,
                model=self.provider_model or None,
                base_url=self.provider_base_url or None,
                timeout=self.provider_timeout,
            ),
            cache=CacheConfig(
                type=self.cache_type,
                ttl_seconds=self.cache_ttl_seconds,
                connection_string=self.cache_url or None,
                key_prefix=self.cache_key_prefix,
                max_entries=self.cache_max_entries,
            ),
            excluded_terms=[t.strip() for t in self.excluded_terms.split(",") if t.strip()],
            translation_context=self.translation_context or None,
            style=self.style,
            glossary=self.glossary,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
