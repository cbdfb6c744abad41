"""
Shared fixtures: fake providers, caches and clocks.

No test talks to a real LLM or Redis.
"""

from __future__ import annotations

import asyncio

import pytest

from jitlate.cache import InMemoryTranslationCache
from jitlate.core.models import StreamResult
from jitlate.pipeline import BatchResolver
from jitlate.providers.base import TranslationProvider


# =============================================================================
# Fake Providers
# =============================================================================


class RecordingProvider(TranslationProvider):
    """Translates to "<lang>:<text>" and records every call."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[list[str], str]] = []
        self.hints: list[dict] = []
        self.error = error

    async def translate(
        self,
        texts,
        target_language,
        excluded_terms=None,
        context=None,
        glossary=None,
        style=None,
    ):
        self.calls.append((list(texts), target_language))
        self.hints.append({
            "excluded_terms": excluded_terms,
            "context": context,
            "glossary": glossary,
            "style": style,
        })
        if self.error is not None:
            raise self.error
        return [f"{target_language}:{t}" for t in texts]


class ShortProvider(RecordingProvider):
    """Breaks the contract by dropping the last translation."""

    async def translate(self, texts, target_language, **hints):
        translations = await super().translate(texts, target_language, **hints)
        return translations[:-1]


class StreamingProvider(RecordingProvider):
    """
    Streams "<lang>:<text>" results.

    delays[i] is how long to wait before yielding result i.
    """

    def __init__(
        self,
        delays: list[float] | None = None,
        error_after: int | None = None,
        extra: list[StreamResult] | None = None,
    ):
        super().__init__()
        self.delays = delays or []
        self.error_after = error_after
        self.extra = extra or []
        self.stream_calls: list[tuple[list[str], str]] = []
        self.closed = False

    def supports_streaming(self) -> bool:
        return True

    async def translate_stream(
        self,
        texts,
        target_language,
        excluded_terms=None,
        context=None,
        glossary=None,
        style=None,
    ):
        self.stream_calls.append((list(texts), target_language))
        try:
            for result in self.extra:
                yield result
            for i, text in enumerate(texts):
                if self.error_after is not None and i >= self.error_after:
                    raise ConnectionError("stream dropped")
                delay = self.delays[i] if i < len(self.delays) else 0
                await asyncio.sleep(delay)
                yield StreamResult(index=i, translation=f"{target_language}:{text}")
        finally:
            self.closed = True


# =============================================================================
# Fake Caches / Clocks
# =============================================================================


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingCache(InMemoryTranslationCache):
    """In-memory cache that remembers every write."""

    def __init__(self):
        super().__init__(ttl_seconds=None)
        self.writes: list[tuple[str, str]] = []

    async def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        await super().set(key, value)


class BrokenCache(InMemoryTranslationCache):
    """A cache whose backend is down (raises on every call)."""

    async def get(self, key: str):
        raise ConnectionError("cache down")

    async def set(self, key: str, value: str) -> None:
        raise ConnectionError("cache down")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def provider():
    return RecordingProvider()


@pytest.fixture
def cache():
    return RecordingCache()


@pytest.fixture
def resolver(provider, cache):
    return BatchResolver(provider, cache)


@pytest.fixture
def clock():
    return FakeClock()
