"""
Translator - owns the provider, cache and pipeline for one configuration.

Every Translator has its own coalescer queue; nothing here is process-wide
except the optional get_translator() convenience instance.
"""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncIterator, Iterable, Sequence

from jitlate.cache import TranslationCache, create_cache
from jitlate.config import TranslationConfig, get_settings, merge_excluded_terms
from jitlate.core.models import (
    ProcessedPage,
    StreamChunk,
    TranslatableItem,
    TranslationResult,
)
from jitlate.html import HTMLProcessor
from jitlate.languages import text_direction
from jitlate.pipeline import BatchResolver, RequestCoalescer, StreamingDelivery
from jitlate.providers import TranslationProvider, create_provider


class Translator:
    """
    Main translation service.

    Usage:
        translator = Translator(TranslationConfig(target_language="es"))

        # Single strings (batched automatically)
        hola = await translator.translate_text("Hello")

        # Whole batches
        result = await translator.translate_batch(items)

        # Documents
        page = await translator.process("<p>Hello</p>")

        # Progressive results
        async for chunk in translator.stream(items):
            ...
    """

    def __init__(
        self,
        config: TranslationConfig,
        provider: TranslationProvider | None = None,
        cache: TranslationCache | None = None,
        html_processor: HTMLProcessor | None = None,
    ):
        self.config = config
        self.provider = provider or create_provider(config.provider)
        self.cache = cache or create_cache(config.cache)
        self.html = html_processor or HTMLProcessor()
        self.excluded_terms = merge_excluded_terms(config.excluded_terms)

        self.resolver = BatchResolver(
            self.provider,
            self.cache,
            excluded_terms=self.excluded_terms,
            context=config.translation_context,
            glossary=config.glossary,
            style=config.style,
            source_language=config.source_language,
        )
        self.coalescer = RequestCoalescer(
            self.resolver,
            default_language=config.target_language,
            delay=config.batch_delay,
        )
        self.streamer = StreamingDelivery(self.resolver, buffer_window=config.stream_buffer)

    @property
    def target_language(self) -> str:
        return self.config.target_language

    @property
    def source_language(self) -> str:
        return self.config.source_language

    @property
    def dir(self) -> str:
        return text_direction(self.config.target_language)

    # =========================================================================
    # Translation
    # =========================================================================

    async def translate_text(self, text: str, target_language: str | None = None) -> str:
        """Translate one string; concurrent calls share a backend request."""
        return await self.coalescer.enqueue(text, target_language)

    async def translate_batch(
        self,
        items: Sequence[TranslatableItem],
        target_language: str | None = None,
    ) -> TranslationResult:
        """Translate pre-fingerprinted items in one resolve call."""
        return await self.resolver.resolve_batch(items, target_language or self.target_language)

    async def translate_texts(
        self,
        texts: Sequence[str],
        target_language: str | None = None,
    ) -> list[str]:
        """
        Translate a list of strings, returning them in order.

        Blank strings and anything the backend left out come back unchanged.
        """
        items = [TranslatableItem.from_text(t) for t in texts]
        result = await self.translate_batch([i for i in items if i.text], target_language)
        return [result.get(item.fingerprint) or text for item, text in zip(items, texts)]

    def stream(
        self,
        items: Iterable[TranslatableItem],
        target_language: str | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream translations: cache hits first, then backend results."""
        return self.streamer.stream(items, target_language or self.target_language)

    def stream_texts(
        self,
        texts: Sequence[str],
        target_language: str | None = None,
    ) -> AsyncIterator[StreamChunk]:
        return self.stream([TranslatableItem.from_text(t) for t in texts], target_language)

    async def process(self, html: str, target_language: str | None = None) -> ProcessedPage:
        """Translate an HTML document and set its lang/dir attributes."""
        target = target_language or self.target_language
        direction = text_direction(target)

        root = self.html.parse(html)
        refs = self.html.extract_text_nodes(root)
        if not refs:
            return ProcessedPage(html=html, translated_count=0, cached_count=0, dir=direction, lang=target)

        result = await self.resolver.resolve_batch([ref.to_item() for ref in refs], target)

        self.html.apply_translations(refs, result.translations)
        self.html.set_page_attributes(root, target, direction)

        return ProcessedPage(
            html=self.html.serialize(root),
            translated_count=result.translated_count,
            cached_count=result.cached_count,
            dir=direction,
            lang=target,
        )

    # =========================================================================
    # Cache Access
    # =========================================================================

    async def get_cached_translation(self, fingerprint: str, target_language: str | None = None) -> str | None:
        return await self.resolver.get_cached(fingerprint, target_language or self.target_language)

    async def cache_translation(
        self,
        fingerprint: str,
        translation: str,
        target_language: str | None = None,
    ) -> None:
        await self.resolver.store(fingerprint, translation, target_language or self.target_language)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        """Flush pending requests and close provider and cache connections."""
        await self.coalescer.aclose()
        await self.provider.aclose()
        await self.cache.aclose()

    async def __aenter__(self) -> Translator:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()


# =============================================================================
# Module-level convenience
# =============================================================================


@lru_cache
def get_translator(target_language: str | None = None) -> Translator:
    """Get a Translator configured from environment settings (one per language)."""
    return Translator(get_settings().translation_config(target_language))
