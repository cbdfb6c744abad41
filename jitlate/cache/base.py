"""
Translation cache abstraction.

A cache is an optimization, never a correctness dependency: implementations
must not raise on backend trouble. A failed read is a miss, a failed write
is dropped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class TranslationCache(ABC):
    """
    Key-value store for translations.

    Keys are built with jitlate.core.hashing.cache_key, i.e.
    "<fingerprint>:<target language>".

    Implementations:
    - InMemoryTranslationCache: per-process, lazy per-entry expiry
    - RedisTranslationCache: shared, expiry delegated to Redis
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get a cached translation, or None on miss."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a translation (best effort)."""
        pass

    async def aclose(self) -> None:
        """Release any connections held by the cache."""
        pass
