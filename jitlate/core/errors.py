"""
Exception taxonomy.

Cache failures never show up here: caches log and degrade to misses.
Everything the provider does wrong surfaces as a ProviderError.
"""

from __future__ import annotations


class JitlateError(Exception):
    """Base class for all jitlate errors."""
    pass


class ProviderError(JitlateError):
    """Raised when the translation backend call fails."""
    pass


class MalformedResponseError(ProviderError):
    """Raised when the backend answers but breaks the response contract."""
    pass


class StreamingNotSupportedError(JitlateError):
    """Raised by providers that have no incremental translation mode."""
    pass


class ConfigurationError(JitlateError, ValueError):
    """Raised for invalid configuration values or an unusable provider setup."""
    pass
