"""
Translation caches.

- InMemoryTranslationCache → single process, development, tests
- RedisTranslationCache → shared across workers and deployments
"""

from __future__ import annotations

from jitlate.cache.base import TranslationCache
from jitlate.cache.memory import InMemoryTranslationCache
from jitlate.cache.redis_cache import RedisTranslationCache
from jitlate.config import CacheConfig


NETWORKED_CACHE_TYPES = {"redis", "networked"}


def create_cache(config: CacheConfig | None = None) -> TranslationCache:
    """
    Create the cache selected by config.type.

    Unknown types fall back to the in-memory cache.
    """
    config = config or CacheConfig()

    if config.type.lower() in NETWORKED_CACHE_TYPES:
        return RedisTranslationCache(
            url=config.connection_string,
            ttl_seconds=config.ttl_seconds,
            key_prefix=config.key_prefix,
        )

    return InMemoryTranslationCache(
        ttl_seconds=config.ttl_seconds,
        max_entries=config.max_entries,
    )


__all__ = [
    "TranslationCache",
    "InMemoryTranslationCache",
    "RedisTranslationCache",
    "create_cache",
]
