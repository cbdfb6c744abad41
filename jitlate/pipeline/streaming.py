"""
Progressive delivery of translations.

Cache hits go out first. Backend results for the misses are then collected
for a short buffering window and released as one chunk, after which every
further result is released as soon as it arrives. Providers without a
streaming mode get a single batch call instead.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import AsyncIterator, Iterable, Sequence

from jitlate.core.errors import JitlateError, ProviderError
from jitlate.core.models import (
    ChunkSource,
    StreamChunk,
    StreamEvent,
    TranslatableItem,
)
from jitlate.languages import normalize_locale
from jitlate.pipeline.resolver import BatchResolver

logger = logging.getLogger(__name__)


class DeliveryMode(str, Enum):
    """How incoming backend results are released to the consumer."""

    BUFFERING = "buffering"  # Hold results until the window closes
    IMMEDIATE = "immediate"  # Release each result as it arrives


_DONE = object()


class StreamingDelivery:
    """
    Streams translations for a list of items.

    Usage:
        streamer = StreamingDelivery(resolver, buffer_window=1.0)
        async for chunk in streamer.stream(items, "fr"):
            for event in chunk.events:
                render(event.index, event.translation)
    """

    def __init__(self, resolver: BatchResolver, buffer_window: float = 1.0):
        self.resolver = resolver
        self.buffer_window = buffer_window

    async def stream(
        self,
        items: Iterable[TranslatableItem],
        target_language: str,
    ) -> AsyncIterator[StreamChunk]:
        """
        Yield chunks of StreamEvent(index, translation) as they become available.

        index is the position in items. Items sharing a fingerprint all get
        an event when that fingerprint is translated.
        """
        items = list(items)
        if not items:
            return
        target_language = normalize_locale(target_language)

        if self.resolver.is_passthrough(target_language):
            yield StreamChunk(
                tuple(StreamEvent(i, item.text) for i, item in enumerate(items)),
                ChunkSource.BATCH,
            )
            return

        positions: dict[str, list[int]] = {}
        for index, item in enumerate(items):
            positions.setdefault(item.fingerprint, []).append(index)

        hits, misses = await self.resolver.lookup(items, target_language)
        if hits:
            yield StreamChunk(
                tuple(
                    StreamEvent(i, hits[item.fingerprint], cached=True)
                    for i, item in enumerate(items)
                    if item.fingerprint in hits
                ),
                ChunkSource.CACHE,
            )

        if not misses:
            return

        if not self.resolver.provider.supports_streaming():
            translated = await self.resolver.translate_misses(misses, target_language)
            events = [
                event
                for item in misses
                if item.fingerprint in translated
                for event in _events(positions, item.fingerprint, translated[item.fingerprint])
            ]
            if events:
                yield StreamChunk(tuple(sorted(events, key=lambda e: e.index)), ChunkSource.BATCH)
            return

        # Closing the consumer must stop the backend stream right away
        async with contextlib.aclosing(self._stream_misses(misses, positions, target_language)) as chunks:
            async for chunk in chunks:
                yield chunk

    # =========================================================================
    # Streaming Path
    # =========================================================================

    async def _stream_misses(
        self,
        misses: Sequence[TranslatableItem],
        positions: dict[str, list[int]],
        target_language: str,
    ) -> AsyncIterator[StreamChunk]:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        pump = loop.create_task(self._pump(misses, target_language, queue))

        mode = DeliveryMode.BUFFERING
        deadline = loop.time() + self.buffer_window
        buffered: list[StreamEvent] = []

        try:
            while True:
                if mode is DeliveryMode.BUFFERING:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        mode = DeliveryMode.IMMEDIATE
                        if buffered:
                            yield StreamChunk(tuple(buffered), ChunkSource.BUFFERED)
                            buffered = []
                        continue
                    try:
                        message = await asyncio.wait_for(queue.get(), remaining)
                    except asyncio.TimeoutError:
                        continue
                else:
                    message = await queue.get()

                if message is _DONE:
                    break

                if isinstance(message, BaseException):
                    if buffered:
                        yield StreamChunk(tuple(buffered), ChunkSource.BUFFERED)
                        buffered = []
                    raise message

                fingerprint, translation = message
                events = _events(positions, fingerprint, translation)
                if mode is DeliveryMode.BUFFERING:
                    buffered.extend(events)
                else:
                    yield StreamChunk(tuple(events), ChunkSource.LIVE)

            if buffered:
                yield StreamChunk(tuple(buffered), ChunkSource.BUFFERED)
        finally:
            if not pump.done():
                pump.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await pump

    async def _pump(
        self,
        misses: Sequence[TranslatableItem],
        target_language: str,
        queue: asyncio.Queue,
    ) -> None:
        """Read the provider stream, cache each result, hand it to the consumer."""
        resolver = self.resolver
        stream = None
        try:
            stream = resolver.provider.translate_stream(
                [item.text for item in misses],
                target_language,
                excluded_terms=resolver.excluded_terms,
                context=resolver.context,
                glossary=resolver.glossary,
                style=resolver.style,
            )
            async for result in stream:
                if not 0 <= result.index < len(misses):
                    logger.warning(f"Ignoring stream result with out-of-range index {result.index}")
                    continue
                if not result.translation:
                    logger.debug(f"Skipping empty stream result for index {result.index}")
                    continue

                item = misses[result.index]
                try:
                    await resolver.store(item.fingerprint, result.translation, target_language)
                except Exception as e:
                    logger.warning(f"Cache write failed: {e}")
                queue.put_nowait((item.fingerprint, result.translation))

            queue.put_nowait(_DONE)
        except JitlateError as e:
            queue.put_nowait(e)
        except Exception as e:
            error = ProviderError(f"Streaming translation to {target_language} failed: {e}")
            error.__cause__ = e
            queue.put_nowait(error)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()


def _events(positions: dict[str, list[int]], fingerprint: str, translation: str) -> list[StreamEvent]:
    return [StreamEvent(index, translation) for index in positions.get(fingerprint, [])]
