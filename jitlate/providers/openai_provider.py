"""
OpenAI chat-completions provider.

Batch mode asks for a JSON object holding the translations array.
Streaming mode asks for one JSON object per line and yields each line as
soon as it is complete.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, AsyncIterator

from openai import (
    APIConnectionError,
    AsyncOpenAI,
    OpenAIError,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from jitlate.core.errors import MalformedResponseError, ProviderError
from jitlate.core.models import StreamResult, TranslationStyle
from jitlate.providers.base import TranslationProvider
from jitlate.providers.prompts import build_system_prompt

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


def parse_translations(content: str | None) -> list[str]:
    """
    Extract the translations array from a JSON-mode completion.

    Accepts a bare array, {"translations": [...]}, or an object whose first
    array value holds the translations.
    """
    if not content:
        raise MalformedResponseError("No content received from OpenAI")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"OpenAI returned invalid JSON: {e}") from e

    if isinstance(parsed, dict):
        if isinstance(parsed.get("translations"), list):
            parsed = parsed["translations"]
        else:
            parsed = next((v for v in parsed.values() if isinstance(v, list)), None)

    if not isinstance(parsed, list):
        raise MalformedResponseError("Invalid JSON structure received from OpenAI")
    if not all(isinstance(t, str) for t in parsed):
        raise MalformedResponseError("OpenAI returned non-string translations")

    return parsed


def parse_stream_line(line: str) -> StreamResult | None:
    """Parse one {"index": n, "translation": "..."} line, or None if it isn't one."""
    line = line.strip().rstrip(",")
    if not line or line.startswith("```"):
        return None

    try:
        parsed = json.loads(line)
    except json.JSONDecodeError:
        logger.debug(f"Skipping unparsable stream line: {line[:80]}")
        return None

    if not isinstance(parsed, dict):
        return None
    index = parsed.get("index")
    translation = parsed.get("translation")
    if not isinstance(index, int) or not isinstance(translation, str):
        return None

    return StreamResult(index=index, translation=translation)


class OpenAIProvider(TranslationProvider):
    """
    Translate through the OpenAI API (or any compatible endpoint).

    Usage:
        provider = OpenAIProvider(model="gpt-4o-mini")
        texts_es = await provider.translate(["Hello", "Goodbye"], "es")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ):
        self.model = model or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL
        self._api_key = api_key or os.getenv("OPENAI_API_KEY", "")
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL
        self._timeout = timeout
        self._client = client

        if not self._api_key and client is None:
            logger.warning("OpenAI API key not provided and OPENAI_API_KEY not set")

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-load OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key or "missing",
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    def _messages(self, texts: list[str], system_prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": json.dumps(texts, ensure_ascii=False)},
        ]

    @retry(
        retry=retry_if_exception_type((APIConnectionError, RateLimitError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _complete(self, messages: list[dict[str, str]]) -> str | None:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.3,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def translate(
        self,
        texts: list[str],
        target_language: str,
        excluded_terms: list[str] | None = None,
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
    ) -> list[str]:
        if not texts:
            return []

        system_prompt = build_system_prompt(
            target_language, excluded_terms, context, glossary, style
        )
        try:
            content = await self._complete(self._messages(texts, system_prompt))
        except OpenAIError as e:
            raise ProviderError(f"OpenAI translation failed: {e}") from e

        return parse_translations(content)

    async def translate_stream(
        self,
        texts: list[str],
        target_language: str,
        excluded_terms: list[str] | None = None,
        context: str | None = None,
        glossary: dict[str, str] | None = None,
        style: TranslationStyle | None = None,
    ) -> AsyncIterator[StreamResult]:
        if not texts:
            return

        system_prompt = build_system_prompt(
            target_language, excluded_terms, context, glossary, style, streaming=True
        )
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(texts, system_prompt),
                temperature=0.3,
                stream=True,
            )
        except OpenAIError as e:
            raise ProviderError(f"OpenAI streaming request failed: {e}") from e

        buffer = ""
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                buffer += chunk.choices[0].delta.content or ""
                *lines, buffer = buffer.split("\n")
                for line in lines:
                    result = parse_stream_line(line)
                    if result is not None:
                        yield result

            result = parse_stream_line(buffer)
            if result is not None:
                yield result
        except OpenAIError as e:
            raise ProviderError(f"OpenAI stream interrupted: {e}") from e
        finally:
            await stream.close()

    def supports_streaming(self) -> bool:
        return True

    def get_model_info(self) -> dict[str, Any]:
        return {
            "name": self.model,
            "capabilities": ["text-generation", "translation", "json-mode", "streaming"],
        }

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
