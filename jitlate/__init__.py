"""
jitlate - just-in-time translation with caching, batching and streaming.

Design:
1. Fingerprint text by content hash
2. Serve cached translations first
3. Batch and deduplicate everything else into one backend call
4. Stream results progressively when the backend can

Usage:
    from jitlate import Translator, TranslationConfig

    translator = Translator(TranslationConfig(target_language="es"))

    # Single strings (micro-batched)
    hola = await translator.translate_text("Hello")

    # Documents
    page = await translator.process("<html><body><p>Hello</p></body></html>")
"""

from jitlate.config import (
    TranslationConfig,
    ProviderConfig,
    CacheConfig,
    Settings,
    get_settings,
)
from jitlate.core import (
    content_hash,
    cache_key,
    TranslatableItem,
    TranslationResult,
    TranslationStyle,
    StreamChunk,
    StreamEvent,
    ProcessedPage,
    JitlateError,
    ProviderError,
    MalformedResponseError,
)
from jitlate.languages import (
    LanguageTier,
    SUPPORTED_LANGUAGES,
    RTL_LANGUAGES,
    get_language_info,
    get_language_name,
    is_language_supported,
    is_rtl,
    text_direction,
)
from jitlate.translator import Translator, get_translator
from jitlate.messages import translate_messages, stream_messages

__all__ = [
    # Configuration
    "TranslationConfig",
    "ProviderConfig",
    "CacheConfig",
    "Settings",
    "get_settings",
    # Core
    "content_hash",
    "cache_key",
    "TranslatableItem",
    "TranslationResult",
    "TranslationStyle",
    "StreamChunk",
    "StreamEvent",
    "ProcessedPage",
    "JitlateError",
    "ProviderError",
    "MalformedResponseError",
    # Translation
    "Translator",
    "get_translator",
    "translate_messages",
    "stream_messages",
    # Language utilities
    "LanguageTier",
    "SUPPORTED_LANGUAGES",
    "RTL_LANGUAGES",
    "get_language_info",
    "get_language_name",
    "is_language_supported",
    "is_rtl",
    "text_direction",
]
