"""
Core data structures for the translation pipeline.

Items carry their fingerprint from the moment they are created, so every
stage downstream (cache, dedup, result maps) keys on the same value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from jitlate.core.hashing import content_hash


# =============================================================================
# Enums
# =============================================================================


class TranslationStyle(str, Enum):
    """Tone / register requested from the backend."""

    FORMAL = "formal"
    NEUTRAL = "neutral"
    CASUAL = "casual"
    MARKETING = "marketing"
    TECHNICAL = "technical"


class ChunkSource(str, Enum):
    """Where a batch of streamed results came from."""

    CACHE = "cache"        # Cache hits, emitted before any backend call
    BUFFERED = "buffered"  # Everything that arrived during the buffer window
    LIVE = "live"          # Single result emitted as soon as it arrived
    BATCH = "batch"        # Non-streaming fallback, whole miss group at once


# =============================================================================
# Items and Results
# =============================================================================


@dataclass(frozen=True)
class TranslatableItem:
    """A piece of source text plus its fingerprint."""

    text: str
    fingerprint: str

    @classmethod
    def from_text(cls, text: str, context: str | None = None) -> TranslatableItem:
        return cls(text=text.strip(), fingerprint=content_hash(text, context))


@dataclass
class TranslationResult:
    """
    Outcome of one resolve call.

    Each distinct fingerprint counts towards at most one of the two counters.
    """

    translations: dict[str, str] = field(default_factory=dict)
    cached_count: int = 0
    translated_count: int = 0

    def get(self, fingerprint: str, default: str | None = None) -> str | None:
        return self.translations.get(fingerprint, default)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self.translations


@dataclass(frozen=True)
class StreamResult:
    """One incremental result from a provider, indexed into the submitted texts."""

    index: int
    translation: str


@dataclass(frozen=True)
class StreamEvent:
    """One translated item, indexed into the caller's item list."""

    index: int
    translation: str
    cached: bool = False


@dataclass(frozen=True)
class StreamChunk:
    """A group of events delivered to a streaming consumer together."""

    events: tuple[StreamEvent, ...]
    source: ChunkSource

    def __len__(self) -> int:
        return len(self.events)


@dataclass
class ProcessedPage:
    """A translated HTML document."""

    html: str
    translated_count: int
    cached_count: int
    dir: Literal["ltr", "rtl"]
    lang: str
