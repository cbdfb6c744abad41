"""
Content fingerprints and cache keys.

Fingerprints are unsalted SHA-256 digests so that caches persisted in Redis
stay valid across restarts and deployments.
"""

from __future__ import annotations

import hashlib


def content_hash(text: str, context: str | None = None) -> str:
    """
    Fingerprint a piece of source text.

    Leading and trailing whitespace is ignored, internal whitespace is not.
    A per-string context hint ("button label", "noun") gives the same text
    its own fingerprint, since it may translate differently.
    """
    source = text.strip()
    if context and context.strip():
        source = f"{source}\x1f{context.strip()}"
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


def cache_key(fingerprint: str, target_language: str) -> str:
    """Cache key for one fingerprint in one target language."""
    return f"{fingerprint}:{target_language}"
