"""
Translation provider contract.

A provider turns an ordered list of texts into an ordered list of
translations of the same length. Providers that can deliver results one at
a time additionally implement translate_stream and report it through
supports_streaming.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator

from jitlate.core.errors import StreamingNotSupportedError
from jitlate.core.models import StreamResult, TranslationStyle


class TranslationProvider(ABC):
    """
    Base class for translation backends.

    Example:
        class UppercaseProvider(TranslationProvider):
            async def translate(self, texts, target_language, **hints):
                return [t.upper() for t in texts]
    """

    @abstractmethod
    async def translate(
        self,
        texts: list[str],
        target_language: str,
        excluded_terms: list[str] | None = None,
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
    ) -> list[str]:
        """
        Translate texts into target_language.

        The result must have the same length and order as texts.
        """
        pass

    def translate_stream(
        self,
        texts: list[str],
        target_language: str,
        excluded_terms: list[str] | None = None,
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
    ) -> AsyncIterator[StreamResult]:
        """
        Yield StreamResult(index, translation) as translations complete.

        index refers to the position in texts.
        """
        raise StreamingNotSupportedError(f"{type(self).__name__} does not support streaming")

    def supports_streaming(self) -> bool:
        return False

    def get_model_info(self) -> dict[str, Any]:
        return {"name": type(self).__name__, "capabilities": ["translation"]}

    async def aclose(self) -> None:
        """Release client resources."""
        pass
