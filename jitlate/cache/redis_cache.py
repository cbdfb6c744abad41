"""
Redis-backed translation cache for sharing translations across workers.

Expiry uses Redis' own EX option. Connection trouble never reaches the
caller: reads become misses, writes are dropped.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from jitlate.cache.base import TranslationCache

logger = logging.getLogger(__name__)


class RedisTranslationCache(TranslationCache):
    """
    Translation cache stored in Redis.

    The underlying client keeps a connection pool, so concurrent lookups
    from parallel resolve calls are not serialized.
    """

    def __init__(
        self,
        url: str | None = None,
        ttl_seconds: int | None = 3600,
        key_prefix: str = "jitlate:",
        client: Any | None = None,
    ):
        self.ttl = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        self.key_prefix = key_prefix or ""

        if client is None:
            url = url or os.environ.get("REDIS_URL") or "redis://localhost:6379/0"
            client = aioredis.from_url(url, decode_responses=True)
        self._client = client

        # Outage logging: warn on the first failure, stay quiet until recovery
        self._degraded = False

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _record_failure(self, operation: str, error: Exception) -> None:
        if not self._degraded:
            self._degraded = True
            logger.warning(f"Redis cache unavailable during {operation}, translating without cache: {error}")
        else:
            logger.debug(f"Redis cache {operation} failed: {error}")

    def _record_success(self) -> None:
        if self._degraded:
            self._degraded = False
            logger.info("Redis cache connection restored")

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(self._key(key))
        except (RedisError, OSError) as e:
            self._record_failure("get", e)
            return None

        self._record_success()
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            if self.ttl is not None:
                await self._client.set(self._key(key), value, ex=self.ttl)
            else:
                await self._client.set(self._key(key), value)
        except (RedisError, OSError) as e:
            self._record_failure("set", e)
            return

        self._record_success()

    async def aclose(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as e:
            logger.debug(f"Error closing Redis connection: {e}")
