"""
Tests for fingerprints, cache keys and core data structures.
"""

import pytest

from jitlate.core.hashing import cache_key, content_hash
from jitlate.core.models import (
    ChunkSource,
    StreamChunk,
    StreamEvent,
    TranslatableItem,
    TranslationResult,
)


# =============================================================================
# Hashing Tests
# =============================================================================


class TestContentHash:
    def test_is_sha256_hex(self):
        assert content_hash("Hello") == (
            "185f8db32271fe25f561a6fc938b2e264306ec304eda518007d1764826381969"
        )

    def test_ignores_surrounding_whitespace(self):
        assert content_hash("  Hello\n") == content_hash("Hello")

    def test_keeps_internal_whitespace(self):
        assert content_hash("Hello  world") != content_hash("Hello world")

    def test_case_sensitive(self):
        assert content_hash("hello") != content_hash("Hello")

    def test_deterministic(self):
        assert content_hash("Welcome back") == content_hash("Welcome back")

    def test_context_gets_own_fingerprint(self):
        assert content_hash("Save", "button") != content_hash("Save")
        assert content_hash("Save", "button") != content_hash("Save", "noun")
        assert content_hash("Save", " button ") == content_hash("Save ", "button")

    def test_blank_context_ignored(self):
        assert content_hash("Save", "  ") == content_hash("Save")
        assert content_hash("Save", None) == content_hash("Save")


class TestCacheKey:
    def test_format(self):
        assert cache_key("abc", "es") == "abc:es"

    def test_languages_do_not_collide(self):
        fp = content_hash("Hello")
        assert cache_key(fp, "es") != cache_key(fp, "fr")


# =============================================================================
# Model Tests
# =============================================================================


class TestTranslatableItem:
    def test_from_text_strips(self):
        item = TranslatableItem.from_text("  Hello  ")

        assert item.text == "Hello"
        assert item.fingerprint == content_hash("Hello")

    def test_same_text_same_item(self):
        assert TranslatableItem.from_text("Hi") == TranslatableItem.from_text(" Hi ")

    def test_frozen(self):
        item = TranslatableItem.from_text("Hi")
        with pytest.raises(Exception):
            item.text = "Bye"


class TestTranslationResult:
    def test_defaults(self):
        result = TranslationResult()

        assert result.translations == {}
        assert result.cached_count == 0
        assert result.translated_count == 0

    def test_get_and_contains(self):
        result = TranslationResult(translations={"fp1": "Hola"})

        assert result.get("fp1") == "Hola"
        assert result.get("missing") is None
        assert result.get("missing", "x") == "x"
        assert "fp1" in result
        assert "missing" not in result


class TestStreamChunk:
    def test_len(self):
        chunk = StreamChunk(
            (StreamEvent(0, "Hola"), StreamEvent(2, "Adiós")),
            ChunkSource.BUFFERED,
        )

        assert len(chunk) == 2
        assert chunk.source == ChunkSource.BUFFERED

    def test_event_not_cached_by_default(self):
        assert StreamEvent(0, "Hola").cached is False
