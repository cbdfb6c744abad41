"""
DSPy-backed provider for Gemini and Anthropic models.

DSPy handles prompting and output parsing through a typed signature;
litellm (inside dspy.LM) talks to the actual API.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

import dspy

from jitlate.core.errors import ConfigurationError, MalformedResponseError, ProviderError
from jitlate.core.models import TranslationStyle
from jitlate.languages import get_language_name
from jitlate.providers.base import TranslationProvider
from jitlate.providers.prompts import build_hints


# =============================================================================
# DSPy Signature
# =============================================================================


class TranslateBatch(dspy.Signature):
    """Translate multiple texts, preserving meaning, tone, markup and order."""

    texts: list[str] = dspy.InputField(desc="List of texts to translate")
    target_language: str = dspy.InputField(desc="Target language name")
    hints: str = dspy.InputField(desc="Context, glossary, style and terms to keep", default="")

    translated_texts: list[str] = dspy.OutputField(desc="List of translated texts in same order")


# =============================================================================
# LM Construction
# =============================================================================


LM_DEFAULTS: dict[str, tuple[str, str, tuple[str, ...]]] = {
    # provider type -> (litellm prefix, default model, api key env vars)
    "gemini": ("gemini", "gemini-2.0-flash", ("GOOGLE_API_KEY", "GEMINI_API_KEY")),
    "google": ("gemini", "gemini-2.0-flash", ("GOOGLE_API_KEY", "GEMINI_API_KEY")),
    "anthropic": ("anthropic", "claude-3-5-haiku-latest", ("ANTHROPIC_API_KEY",)),
}


def build_lm(
    provider: str,
    model: str | None = None,
    api_key: str | None = None,
    base_url: str | None = None,
) -> dspy.LM:
    """
    Build a DSPy LM for a provider type.

    Raises:
        ConfigurationError: unknown provider or no API key available
    """
    if provider not in LM_DEFAULTS:
        raise ConfigurationError(f"Unknown provider: {provider}")

    prefix, default_model, key_vars = LM_DEFAULTS[provider]
    api_key = api_key or next((os.getenv(v) for v in key_vars if os.getenv(v)), None)
    if not api_key:
        raise ConfigurationError(f"{' or '.join(key_vars)} not set")

    kwargs: dict[str, Any] = {"api_key": api_key}
    if base_url:
        kwargs["api_base"] = base_url

    return dspy.LM(model=f"{prefix}/{model or default_model}", **kwargs)


# =============================================================================
# Provider
# =============================================================================


class DSPyProvider(TranslationProvider):
    """
    Translate with any LM DSPy can drive.

    DSPy calls are synchronous, so they run in a worker thread.
    """

    def __init__(self, lm: dspy.LM, predictor: Any | None = None):
        self.lm = lm
        self._predict = predictor or dspy.Predict(TranslateBatch)

    @classmethod
    def for_provider(
        cls,
        provider: str,
        model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> DSPyProvider:
        return cls(build_lm(provider, model, api_key, base_url))

    def _run(self, texts: list[str], target_language: str, hints: str) -> Any:
        with dspy.context(lm=self.lm):
            result = self._predict(
                texts=texts,
                target_language=get_language_name(target_language),
                hints=hints,
            )
        return result.translated_texts

    async def translate(
        self,
        texts: list[str],
        target_language: str,
        excluded_terms: list[str] | None = None,
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
    ) -> list[str]:
        if not texts:
            return []

        hints = "\n".join(build_hints(excluded_terms, context, glossary, style))
        try:
            translations = await asyncio.to_thread(
                self._run, texts, target_language, hints
            )
        except Exception as e:
            raise ProviderError(f"DSPy translation failed: {e}") from e

        if not isinstance(translations, list):
            raise MalformedResponseError("DSPy returned a non-list translation payload")
        return [str(t).strip() for t in translations]

    def get_model_info(self) -> dict[str, Any]:
        return {"name": getattr(self.lm, "model", "dspy"), "capabilities": ["translation"]}
