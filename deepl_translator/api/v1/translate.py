"""Translation endpoints."""

from __future__ import annotations

from typing import AsyncGenerator

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from deepl_translator.api.deps import get_language_catalog, get_orchestrator
from deepl_translator.schemas.translation import (
    BatchItem,
    BatchTranslateRequest,
    BatchTranslateResponse,
    StreamEvent,
    TranslateRequest,
    TranslateResponse,
)
from deepl_translator.services.language.catalog import LanguageCatalog
from deepl_translator.services.translation.base import (
    ProgressEvent,
    TranslationResult,
)
from deepl_translator.services.translation.orchestrator import TranslationOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/translate", tags=["translate"])


@router.post("", response_model=TranslateResponse)
async def translate(
    body: TranslateRequest,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
    language_catalog: LanguageCatalog = Depends(get_language_catalog),
) -> TranslateResponse | StreamingResponse:
    """Translate one text.

    With `stream=true` the answer is an SSE stream of progress events that
    ends with a `done` event carrying the result or the error.
    Otherwise failures surface as the structured error response.
    """
    if body.stream:
        return StreamingResponse(
            _stream_events(orchestrator, body),
            media_type="text/event-stream",
        )

    result = await orchestrator.translate(
        body.text, body.target_lang, body.source_lang
    )
    detected = result.detected_source_language
    return TranslateResponse(
        translated_text=result.translated_text,
        detected_source_language=detected,
        detected_source_language_name=language_catalog.name_for(detected),
        detected_source_language_flag=language_catalog.flag_for(detected),
        success=result.success,
    )


@router.post("/batch", response_model=BatchTranslateResponse)
async def translate_batch(
    body: BatchTranslateRequest,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
) -> BatchTranslateResponse:
    """Translate several texts; failed items are tagged, not fatal."""
    results = await orchestrator.translate_many(
        body.texts, body.target_lang, body.source_lang
    )
    return BatchTranslateResponse(
        results=[BatchItem.model_validate(item) for item in results]
    )


def _to_stream_event(event: ProgressEvent | TranslationResult) -> StreamEvent:
    if isinstance(event, ProgressEvent):
        return StreamEvent(
            message=event.message, percent=event.percent, attempt=event.attempt
        )
    return StreamEvent(
        done=True,
        translated_text=event.translated_text,
        detected_source_language=event.detected_source_language,
        success=event.success,
        error_code=event.error.code if event.error else None,
        error_message=event.error_message,
    )


async def _stream_events(
    orchestrator: TranslationOrchestrator,
    body: TranslateRequest,
) -> AsyncGenerator[str, None]:
    async for event in orchestrator.stream(
        body.text, body.target_lang, body.source_lang
    ):
        payload = _to_stream_event(event).model_dump_json(exclude_none=True)
        yield f"data: {payload}\n\n"
    logger.debug("translation_stream_closed")
