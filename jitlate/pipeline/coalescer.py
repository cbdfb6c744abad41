"""
Debounced micro-batching of single-string translation requests.

Components ask for one string at a time; the coalescer collects everything
requested within a short window and sends it through the resolver in one
batch per target language.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from jitlate.core.models import TranslatableItem
from jitlate.languages import normalize_locale
from jitlate.pipeline.resolver import BatchResolver

logger = logging.getLogger(__name__)


@dataclass
class QueuedItem:
    """A pending request and the future its caller is waiting on."""

    text: str  # As submitted; returned if no translation comes back
    item: TranslatableItem
    target_language: str | None
    future: asyncio.Future[str]


class RequestCoalescer:
    """
    Collects single-text requests and flushes them in batches.

    The first request after an idle period starts a timer; requests arriving
    before it fires join the same batch without pushing the timer back, so
    no request waits longer than one delay before being dispatched.

    Usage:
        coalescer = RequestCoalescer(resolver, default_language="es")
        hola, adios = await asyncio.gather(
            coalescer.enqueue("Hello"),
            coalescer.enqueue("Goodbye"),
        )
    """

    def __init__(
        self,
        resolver: BatchResolver,
        default_language: str,
        delay: float = 0.05,
    ):
        self.resolver = resolver
        self.default_language = default_language
        self.delay = delay

        self._queue: list[QueuedItem] = []
        self._timer: asyncio.TimerHandle | None = None
        self._flushes: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Requests waiting for the next flush."""
        return len(self._queue)

    # =========================================================================
    # Enqueue
    # =========================================================================

    def submit(self, text: str, target_language: str | None = None) -> asyncio.Future[str]:
        """
        Queue a text and return a future for its translation.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        if not text or not text.strip():
            future.set_result(text)
            return future
        if self._closed:
            raise RuntimeError("RequestCoalescer is closed")

        self._queue.append(QueuedItem(
            text=text,
            item=TranslatableItem.from_text(text),
            target_language=target_language,
            future=future,
        ))

        if self._timer is None:
            self._timer = loop.call_later(self.delay, self._on_timer)

        return future

    async def enqueue(self, text: str, target_language: str | None = None) -> str:
        """Translate a single text as part of the next batch."""
        return await self.submit(text, target_language)

    # =========================================================================
    # Flushing
    # =========================================================================

    def _take_queue(self) -> list[QueuedItem]:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        batch, self._queue = self._queue, []
        return batch

    def _on_timer(self) -> None:
        self._timer = None
        batch = self._take_queue()
        if not batch:
            return

        task = asyncio.get_running_loop().create_task(self._flush(batch))
        self._flushes.add(task)
        task.add_done_callback(self._flushes.discard)

    async def _flush(self, batch: list[QueuedItem]) -> None:
        groups: dict[str, list[QueuedItem]] = {}
        for queued in batch:
            language = normalize_locale(queued.target_language or self.default_language)
            groups.setdefault(language, []).append(queued)

        logger.debug(f"Flushing {len(batch)} queued texts in {len(groups)} language group(s)")

        await asyncio.gather(
            *(self._flush_group(language, items) for language, items in groups.items())
        )

    async def _flush_group(self, language: str, queued: list[QueuedItem]) -> None:
        unique = list({q.item.fingerprint: q.item for q in queued}.values())

        try:
            result = await self.resolver.resolve_batch(unique, language)
        except asyncio.CancelledError:
            for q in queued:
                q.future.cancel()
            raise
        except Exception as e:
            # Every caller in this group sees the same failure
            for q in queued:
                if not q.future.done():
                    q.future.set_exception(e)
            return

        for q in queued:
            if not q.future.done():
                q.future.set_result(result.get(q.item.fingerprint) or q.text)

    async def flush(self) -> None:
        """Flush the queue now and wait for every in-flight flush."""
        batch = self._take_queue()
        if batch:
            await self._flush(batch)
        if self._flushes:
            await asyncio.gather(*list(self._flushes), return_exceptions=True)

    async def aclose(self) -> None:
        """Flush outstanding work and stop accepting requests."""
        self._closed = True
        await self.flush()
