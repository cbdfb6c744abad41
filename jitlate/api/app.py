"""
FastAPI application exposing the translator over HTTP.

Routes:
- POST /translate          batch translation
- POST /translate/stream   Server-Sent Events, cache hits first
- POST /translate/html     whole-document translation
- GET  /languages          supported language table
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from jitlate.config import Settings, get_settings
from jitlate.core.errors import ProviderError
from jitlate.core.models import TranslatableItem
from jitlate.languages import SUPPORTED_LANGUAGES, text_direction
from jitlate.translator import Translator

logger = logging.getLogger(__name__)


# =============================================================================
# Request / Response Models
# =============================================================================


class TranslateRequest(BaseModel):
    texts: list[str]
    target_language: str | None = Field(default=None, alias="targetLang")

    model_config = {"populate_by_name": True}


class TranslateResponse(BaseModel):
    translations: list[str]
    cached_count: int
    translated_count: int


class TranslateHTMLRequest(BaseModel):
    html: str
    target_language: str | None = Field(default=None, alias="targetLang")

    model_config = {"populate_by_name": True}


class TranslateHTMLResponse(BaseModel):
    html: str
    lang: str
    dir: str
    translated_count: int
    cached_count: int


class LanguageResponse(BaseModel):
    code: str
    language: str
    region: str
    tier: str
    dir: str


# =============================================================================
# Request Limits
# =============================================================================


def validate_request_limits(texts: list[str], max_texts: int, max_total_chars: int) -> None:
    """Reject oversized requests before they reach the backend."""
    if len(texts) > max_texts:
        raise HTTPException(
            status_code=413,
            detail=f"Too many texts: {len(texts)} exceeds limit of {max_texts}",
        )

    total_chars = sum(len(t) for t in texts)
    if total_chars > max_total_chars:
        raise HTTPException(
            status_code=413,
            detail=f"Request too large: {total_chars} chars exceeds limit of {max_total_chars}",
        )


def _sse(payload: object) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    translator: Translator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the API.

    Pass a translator to serve it (tests, embedding); otherwise one is
    created from environment settings at startup and closed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = translator is None
        app.state.translator = translator or Translator(settings.translation_config())
        logger.info(f"Translation API ready (default target: {app.state.translator.target_language})")

        yield

        if owned:
            await app.state.translator.aclose()

    app = FastAPI(
        title="jitlate",
        description="Just-in-time translation with caching and streaming",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    def get_translator() -> Translator:
        return app.state.translator

    # =========================================================================
    # Routes
    # =========================================================================

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/languages", response_model=list[LanguageResponse])
    async def languages() -> list[LanguageResponse]:
        return [
            LanguageResponse(
                code=lang.code,
                language=lang.language,
                region=lang.region,
                tier=lang.tier.value,
                dir=text_direction(lang.code),
            )
            for lang in SUPPORTED_LANGUAGES
        ]

    @app.post("/translate", response_model=TranslateResponse)
    async def translate(
        request: TranslateRequest,
        translator: Translator = Depends(get_translator),
    ) -> TranslateResponse:
        validate_request_limits(request.texts, settings.max_texts, settings.max_total_chars)

        items = [TranslatableItem.from_text(t) for t in request.texts]
        try:
            result = await translator.translate_batch(
                [item for item in items if item.text],
                request.target_language,
            )
        except ProviderError as e:
            logger.exception("Batch translation failed")
            raise HTTPException(status_code=502, detail=str(e))

        return TranslateResponse(
            translations=[
                result.get(item.fingerprint) or text
                for item, text in zip(items, request.texts)
            ],
            cached_count=result.cached_count,
            translated_count=result.translated_count,
        )

    @app.post("/translate/stream")
    async def translate_stream(
        request: TranslateRequest,
        translator: Translator = Depends(get_translator),
    ) -> StreamingResponse:
        validate_request_limits(request.texts, settings.max_texts, settings.max_total_chars)

        async def events() -> AsyncIterator[str]:
            try:
                async for chunk in translator.stream_texts(request.texts, request.target_language):
                    for event in chunk.events:
                        yield _sse({"index": event.index, "translation": event.translation})
            except ProviderError as e:
                logger.exception("Streaming translation failed")
                yield f"event: error\n{_sse({'error': str(e)})}"
            yield "data: [DONE]\n\n"

        return StreamingResponse(
            events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    @app.post("/translate/html", response_model=TranslateHTMLResponse)
    async def translate_html(
        request: TranslateHTMLRequest,
        translator: Translator = Depends(get_translator),
    ) -> TranslateHTMLResponse:
        validate_request_limits([request.html], max_texts=1, max_total_chars=settings.max_html_chars)
        try:
            page = await translator.process(request.html, request.target_language)
        except ProviderError as e:
            logger.exception("HTML translation failed")
            raise HTTPException(status_code=502, detail=str(e))

        return TranslateHTMLResponse(
            html=page.html,
            lang=page.lang,
            dir=page.dir,
            translated_count=page.translated_count,
            cached_count=page.cached_count,
        )

    return app


def serve() -> None:
    """Run the API with uvicorn (jitlate-api console script)."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jitlate.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
