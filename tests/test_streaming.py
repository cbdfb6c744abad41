"""
Tests for StreamingDelivery: cache hits first, buffer window, then live results.
"""

import asyncio

import pytest

from jitlate.core.errors import ProviderError
from jitlate.core.hashing import cache_key
from jitlate.core.models import ChunkSource, StreamResult, TranslatableItem
from jitlate.pipeline import BatchResolver, StreamingDelivery

from conftest import RecordingCache, RecordingProvider, StreamingProvider


def items(*texts):
    return [TranslatableItem.from_text(t) for t in texts]


async def collect(stream):
    return [chunk async for chunk in stream]


def flat(chunks):
    return sorted((e.index, e.translation) for chunk in chunks for e in chunk.events)


# =============================================================================
# Cache-First Tests
# =============================================================================


class TestCacheFirst:
    @pytest.mark.asyncio
    async def test_all_cached_never_calls_backend(self):
        provider = StreamingProvider()
        cache = RecordingCache()
        resolver = BatchResolver(provider, cache)
        batch = items("Hello", "World")
        for item in batch:
            await resolver.store(item.fingerprint, f"cached:{item.text}", "es")

        chunks = await collect(StreamingDelivery(resolver).stream(batch, "es"))

        assert len(chunks) == 1
        assert chunks[0].source == ChunkSource.CACHE
        assert flat(chunks) == [(0, "cached:Hello"), (1, "cached:World")]
        assert all(e.cached for e in chunks[0].events)
        assert provider.stream_calls == []
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_hits_precede_backend_results(self):
        provider = StreamingProvider()
        resolver = BatchResolver(provider, RecordingCache())
        hello, world = items("Hello", "World")
        await resolver.store(hello.fingerprint, "Hola", "es")

        chunks = await collect(StreamingDelivery(resolver, buffer_window=0.05).stream([hello, world], "es"))

        assert chunks[0].source == ChunkSource.CACHE
        assert [(e.index, e.translation) for e in chunks[0].events] == [(0, "Hola")]
        assert flat(chunks[1:]) == [(1, "es:World")]
        assert provider.stream_calls == [(["World"], "es")]

    @pytest.mark.asyncio
    async def test_empty_input_yields_nothing(self, resolver):
        assert await collect(StreamingDelivery(resolver).stream([], "es")) == []


# =============================================================================
# Buffering Tests
# =============================================================================


class TestBuffering:
    @pytest.mark.asyncio
    async def test_buffer_then_live(self):
        provider = StreamingProvider(delays=[0, 0, 0.2])
        resolver = BatchResolver(provider, RecordingCache())
        streamer = StreamingDelivery(resolver, buffer_window=0.1)

        chunks = await collect(streamer.stream(items("A", "B", "C"), "es"))

        assert [c.source for c in chunks] == [ChunkSource.BUFFERED, ChunkSource.LIVE]
        assert [e.index for e in chunks[0].events] == [0, 1]
        assert [(e.index, e.translation) for e in chunks[1].events] == [(2, "es:C")]

    @pytest.mark.asyncio
    async def test_fast_stream_delivered_as_one_chunk(self):
        provider = StreamingProvider()
        resolver = BatchResolver(provider, RecordingCache())

        chunks = await collect(StreamingDelivery(resolver, buffer_window=1.0).stream(items("A", "B"), "es"))

        assert len(chunks) == 1
        assert chunks[0].source == ChunkSource.BUFFERED
        assert flat(chunks) == [(0, "es:A"), (1, "es:B")]

    @pytest.mark.asyncio
    async def test_empty_buffer_emits_nothing(self):
        provider = StreamingProvider(delays=[0.15])
        resolver = BatchResolver(provider, RecordingCache())

        chunks = await collect(StreamingDelivery(resolver, buffer_window=0.05).stream(items("A"), "es"))

        assert [c.source for c in chunks] == [ChunkSource.LIVE]

    @pytest.mark.asyncio
    async def test_zero_window_is_immediate(self):
        provider = StreamingProvider()
        resolver = BatchResolver(provider, RecordingCache())

        chunks = await collect(StreamingDelivery(resolver, buffer_window=0).stream(items("A", "B"), "es"))

        assert [c.source for c in chunks] == [ChunkSource.LIVE, ChunkSource.LIVE]
        assert flat(chunks) == [(0, "es:A"), (1, "es:B")]

    @pytest.mark.asyncio
    async def test_duplicates_share_one_result(self):
        provider = StreamingProvider()
        resolver = BatchResolver(provider, RecordingCache())

        chunks = await collect(StreamingDelivery(resolver).stream(items("A", "B", "A"), "es"))

        assert provider.stream_calls == [(["A", "B"], "es")]
        assert flat(chunks) == [(0, "es:A"), (1, "es:B"), (2, "es:A")]

    @pytest.mark.asyncio
    async def test_results_cached_as_they_arrive(self):
        provider = StreamingProvider()
        cache = RecordingCache()
        resolver = BatchResolver(provider, cache)
        batch = items("A", "B")

        await collect(StreamingDelivery(resolver, buffer_window=0).stream(batch, "es"))

        assert cache.writes == [
            (cache_key(batch[0].fingerprint, "es"), "es:A"),
            (cache_key(batch[1].fingerprint, "es"), "es:B"),
        ]

    @pytest.mark.asyncio
    async def test_out_of_range_index_ignored(self):
        provider = StreamingProvider(extra=[StreamResult(index=7, translation="???")])
        resolver = BatchResolver(provider, RecordingCache())

        chunks = await collect(StreamingDelivery(resolver, buffer_window=0).stream(items("A"), "es"))

        assert flat(chunks) == [(0, "es:A")]


# =============================================================================
# Fallback Tests
# =============================================================================


class TestFallback:
    @pytest.mark.asyncio
    async def test_non_streaming_provider_gets_one_batch(self, provider, cache):
        resolver = BatchResolver(provider, cache)

        chunks = await collect(StreamingDelivery(resolver).stream(items("A", "B", "A"), "es"))

        assert [c.source for c in chunks] == [ChunkSource.BATCH]
        assert [(e.index, e.translation) for e in chunks[0].events] == [
            (0, "es:A"), (1, "es:B"), (2, "es:A"),
        ]
        assert provider.calls == [(["A", "B"], "es")]

    @pytest.mark.asyncio
    async def test_passthrough_language(self, provider, cache):
        resolver = BatchResolver(provider, cache, source_language="en")

        chunks = await collect(StreamingDelivery(resolver).stream(items("Hello"), "en"))

        assert [c.source for c in chunks] == [ChunkSource.BATCH]
        assert flat(chunks) == [(0, "Hello")]
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_locale_spelling_normalized(self, provider, cache):
        resolver = BatchResolver(provider, cache)
        await resolver.resolve_batch(items("Hello"), "pt_BR")

        chunks = await collect(StreamingDelivery(resolver).stream(items("Hello", "Bye"), "PT-br"))

        assert [c.source for c in chunks] == [ChunkSource.CACHE, ChunkSource.BATCH]
        assert flat(chunks) == [(0, "pt_BR:Hello"), (1, "pt_BR:Bye")]
        assert provider.calls[-1] == (["Bye"], "pt_BR")


# =============================================================================
# Failure / Cancellation Tests
# =============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_error_after_partial_results(self):
        provider = StreamingProvider(error_after=1)
        cache = RecordingCache()
        resolver = BatchResolver(provider, cache)
        received = []

        with pytest.raises(ProviderError):
            async for chunk in StreamingDelivery(resolver, buffer_window=0).stream(items("A", "B"), "es"):
                received.extend(chunk.events)

        assert [(e.index, e.translation) for e in received] == [(0, "es:A")]
        assert len(cache.writes) == 1

    @pytest.mark.asyncio
    async def test_buffered_results_delivered_before_error(self):
        provider = StreamingProvider(error_after=1)
        resolver = BatchResolver(provider, RecordingCache())
        sources = []

        with pytest.raises(ProviderError):
            async for chunk in StreamingDelivery(resolver, buffer_window=1.0).stream(items("A", "B"), "es"):
                sources.append(chunk.source)

        assert sources == [ChunkSource.BUFFERED]

    @pytest.mark.asyncio
    async def test_non_streaming_failure_raises(self, cache):
        provider = RecordingProvider(error=RuntimeError("down"))
        resolver = BatchResolver(provider, cache)

        with pytest.raises(ProviderError):
            await collect(StreamingDelivery(resolver).stream(items("A"), "es"))

    @pytest.mark.asyncio
    async def test_closing_consumer_stops_backend(self):
        provider = StreamingProvider(delays=[0, 0.05, 0.05])
        cache = RecordingCache()
        resolver = BatchResolver(provider, cache)

        stream = StreamingDelivery(resolver, buffer_window=0).stream(items("A", "B", "C"), "es")
        first = await stream.__anext__()
        await stream.aclose()
        await asyncio.sleep(0.15)

        assert [e.index for e in first.events] == [0]
        assert len(cache.writes) == 1
        assert provider.closed
