"""
Translation providers.

Selected by ProviderConfig.type:
- "openai" → OpenAIProvider
- "gemini" / "google" / "anthropic" → DSPyProvider
- anything else ("custom", unknown) → MockProvider
"""

from __future__ import annotations

from jitlate.config import ProviderConfig
from jitlate.providers.base import TranslationProvider
from jitlate.providers.dspy_provider import DSPyProvider, LM_DEFAULTS
from jitlate.providers.mock import MockProvider
from jitlate.providers.openai_provider import OpenAIProvider


def create_provider(config: ProviderConfig | None = None) -> TranslationProvider:
    """Create the provider selected by config.type."""
    config = config or ProviderConfig()
    provider_type = config.type.lower()

    if provider_type == "openai":
        return OpenAIProvider(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    if provider_type in LM_DEFAULTS:
        return DSPyProvider.for_provider(
            provider_type,
            model=config.model,
            api_key=config.api_key,
            base_url=config.base_url,
        )

    return MockProvider()


__all__ = [
    "TranslationProvider",
    "OpenAIProvider",
    "DSPyProvider",
    "MockProvider",
    "create_provider",
]
