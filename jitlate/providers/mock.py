"""
Mock provider used for custom and unknown provider types.
"""

from __future__ import annotations

from typing import Any

from jitlate.core.models import TranslationStyle
from jitlate.providers.base import TranslationProvider


class MockProvider(TranslationProvider):
    """Marks texts instead of translating them: "[MOCK es] Hello"."""

    async def translate(
        self,
        texts: list[str],
        target_language: str,
        excluded_terms: list[str] | None = None,
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
    ) -> list[str]:
        return [f"[MOCK {target_language}] {text}" for text in texts]

    def get_model_info(self) -> dict[str, Any]:
        return {"name": "mock", "capabilities": []}
