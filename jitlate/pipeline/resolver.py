"""
Cache-or-translate resolution for one target language.
Locale spellings such as es-MX, es_mx and ES_MX are treated as one language.

Pipeline: look up every item in the cache concurrently → dedupe the misses
by fingerprint → one provider call for the miss group → write the new
translations back to the cache.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence

from jitlate.cache.base import TranslationCache
from jitlate.core.errors import JitlateError, MalformedResponseError, ProviderError
from jitlate.core.hashing import cache_key
from jitlate.core.models import TranslatableItem, TranslationResult, TranslationStyle
from jitlate.languages import normalize_locale
from jitlate.providers.base import TranslationProvider

logger = logging.getLogger(__name__)


class BatchResolver:
    """
    Resolves batches of items to translations.

    Usage:
        resolver = BatchResolver(provider, cache)
        result = await resolver.resolve_batch(items, "es")
        result.translations[item.fingerprint]
    """

    def __init__(
        self,
        provider: TranslationProvider,
        cache: TranslationCache,
        excluded_terms: Iterable[str] = (),
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
        source_language: str | None = None,
    ):
        self.provider = provider
        self.cache = cache
        self.excluded_terms = list(excluded_terms)
        self.context = context
        self.glossary = dict(glossary or {})
        self.style = style
        self.source_language = source_language

    # =========================================================================
    # Public API
    # =========================================================================

    def with_context(self, context: str | None) -> BatchResolver:
        """
        A resolver for strings that carry their own context hint.

        Shares this resolver's provider and cache; the hint is appended to the
        configured context and sent to the provider with it. Items resolved
        through it should be fingerprinted with the same hint.
        """
        if not context or not context.strip():
            return self
        combined = f"{self.context}\n{context.strip()}" if self.context else context.strip()
        return BatchResolver(
            self.provider,
            self.cache,
            excluded_terms=self.excluded_terms,
            context=combined,
            glossary=self.glossary,
            style=self.style,
            source_language=self.source_language,
        )

    def is_passthrough(self, target_language: str) -> bool:
        """True when the target is the source language, so nothing needs translating."""
        if not self.source_language:
            return False
        return normalize_locale(target_language) == normalize_locale(self.source_language)

    async def resolve_batch(
        self,
        items: Sequence[TranslatableItem],
        target_language: str,
    ) -> TranslationResult:
        """
        Translate items, serving what we can from cache.

        Raises:
            ProviderError: the provider call for the miss group failed.
                Nothing from the miss group is cached in that case.
        """
        if not items:
            return TranslationResult()

        target_language = normalize_locale(target_language)
        if self.is_passthrough(target_language):
            return TranslationResult(translations={item.fingerprint: item.text for item in items})

        hits, misses = await self.lookup(items, target_language)
        result = TranslationResult(translations=dict(hits), cached_count=len(hits))

        if not misses:
            return result

        translated = await self.translate_misses(misses, target_language)
        result.translations.update(translated)
        result.translated_count = len(translated)

        logger.debug(
            f"Resolved {len(items)} items to {target_language}: "
            f"{result.cached_count} cached, {result.translated_count} translated"
        )
        return result

    async def lookup(
        self,
        items: Sequence[TranslatableItem],
        target_language: str,
    ) -> tuple[dict[str, str], list[TranslatableItem]]:
        """
        Check the cache for every item.

        Returns:
            (hits by fingerprint, misses deduplicated by fingerprint in first-seen order)
            Blank items appear in neither.
        """
        target_language = normalize_locale(target_language)
        items = [item for item in items if item.text]
        cached = await asyncio.gather(
            *(self.cache.get(cache_key(item.fingerprint, target_language)) for item in items),
            return_exceptions=True,
        )

        hits: dict[str, str] = {}
        misses: dict[str, TranslatableItem] = {}
        for item, value in zip(items, cached):
            if isinstance(value, BaseException):
                logger.warning(f"Cache lookup failed, treating as miss: {value}")
                value = None
            if value:
                hits[item.fingerprint] = value
            elif item.fingerprint not in misses:
                misses[item.fingerprint] = item

        return hits, [item for fp, item in misses.items() if fp not in hits]

    async def translate_misses(
        self,
        misses: Sequence[TranslatableItem],
        target_language: str,
    ) -> dict[str, str]:
        """
        Send one miss group to the provider and cache the results.

        misses must already be deduplicated. Translations are matched back to
        misses by position; empty translations are dropped.
        """
        target_language = normalize_locale(target_language)
        texts = [item.text for item in misses]
        try:
            translations = await self.provider.translate(
                texts,
                target_language,
                excluded_terms=self.excluded_terms,
                context=self.context,
                glossary=self.glossary,
                style=self.style,
            )
        except JitlateError:
            raise
        except Exception as e:
            raise ProviderError(f"Translation to {target_language} failed: {e}") from e

        if not isinstance(translations, list):
            raise MalformedResponseError(
                f"Provider returned {type(translations).__name__}, expected a list"
            )
        if len(translations) != len(texts):
            raise MalformedResponseError(
                f"Provider returned {len(translations)} translations for {len(texts)} texts"
            )
        if not all(isinstance(t, str) for t in translations):
            raise MalformedResponseError("Provider returned non-string translations")

        resolved = {
            item.fingerprint: translation
            for item, translation in zip(misses, translations)
            if translation
        }
        writes = await asyncio.gather(
            *(self.store(fp, translation, target_language) for fp, translation in resolved.items()),
            return_exceptions=True,
        )
        for error in writes:
            if isinstance(error, Exception):
                logger.warning(f"Cache write failed: {error}")
        return resolved

    # =========================================================================
    # Single Entries
    # =========================================================================

    async def get_cached(self, fingerprint: str, target_language: str) -> str | None:
        return await self.cache.get(cache_key(fingerprint, normalize_locale(target_language)))

    async def store(self, fingerprint: str, translation: str, target_language: str) -> None:
        await self.cache.set(cache_key(fingerprint, normalize_locale(target_language)), translation)
