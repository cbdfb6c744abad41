"""
Core building blocks: fingerprints, data model, errors.
"""

from jitlate.core.hashing import content_hash, cache_key
from jitlate.core.models import (
    TranslationStyle,
    ChunkSource,
    TranslatableItem,
    TranslationResult,
    StreamResult,
    StreamEvent,
    StreamChunk,
    ProcessedPage,
)
from jitlate.core.errors import (
    JitlateError,
    ProviderError,
    MalformedResponseError,
    StreamingNotSupportedError,
    ConfigurationError,
)

__all__ = [
    "content_hash",
    "cache_key",
    "TranslationStyle",
    "ChunkSource",
    "TranslatableItem",
    "TranslationResult",
    "StreamResult",
    "StreamEvent",
    "StreamChunk",
    "ProcessedPage",
    "JitlateError",
    "ProviderError",
    "MalformedResponseError",
    "StreamingNotSupportedError",
    "ConfigurationError",
]
