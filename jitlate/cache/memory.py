"""
In-process translation cache.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable

from jitlate.cache.base import TranslationCache


class InMemoryTranslationCache(TranslationCache):
    """
    Bounded in-memory cache with per-entry expiry.

    Expiry is lazy: an expired entry is only evicted when it is read.
    A ttl of zero, a negative ttl or None all mean "never expire".
    When more than max_entries are stored, the oldest-stored entry goes first.
    """

    def __init__(
        self,
        ttl_seconds: float | None = 3600,
        max_entries: int | None = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        self.max_entries = max_entries if max_entries and max_entries > 0 else None
        self._clock = clock
        self._entries: OrderedDict[str, tuple[str, float]] = OrderedDict()

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, stored_at = entry
        if self.ttl is not None and self._clock() - stored_at > self.ttl:
            del self._entries[key]
            return None

        return value

    async def set(self, key: str, value: str) -> None:
        # Re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        self._entries[key] = (value, self._clock())

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
