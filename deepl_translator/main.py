"""FastAPI application entrypoint.

All routes prefixed /v1. Auto-generated OpenAPI docs at /docs.

A single TranslationClient (shared httpx connection pool) is created during
the lifespan and stored on app.state for injection via Depends().
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from deepl_translator.api.v1.health import router as health_router
from deepl_translator.api.v1.languages import router as languages_router
from deepl_translator.api.v1.speech import router as speech_router
from deepl_translator.api.v1.translate import router as translate_router
from deepl_translator.core.config import settings
from deepl_translator.core.exceptions import TranslatorError
from deepl_translator.core.log import configure_logging
from deepl_translator.services.translation.client import TranslationClient

configure_logging(settings.log_level, settings.log_file)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the translation client on startup, close it on shutdown."""
    logger.info("app_startup", app=settings.app_name, version=settings.app_version)
    if settings.uses_default_api_key:
        logger.warning("default_api_key_in_use")
    elif not settings.has_valid_api_key:
        logger.warning("api_key_format_invalid")

    client = TranslationClient(
        api_key=settings.deepl_api_key,
        base_url=settings.deepl_base_url,
        auth_scheme=settings.deepl_auth_scheme,
        timeout_seconds=settings.request_timeout_seconds,
    )
    app.state.translation_client = client
    app.state.speech_synthesizer = None

    logger.info("app_providers_ready")
    yield

    logger.info("app_shutdown")
    if app.state.speech_synthesizer is not None:
        app.state.speech_synthesizer.stop()
    await client.aclose()


app = FastAPI(
    title=f"{settings.app_name} API",
    description="Text translation with retries, progress streaming and local language detection.",
    version=settings.app_version,
    lifespan=lifespan,
)


@app.exception_handler(TranslatorError)
async def translator_error_handler(request: Request, exc: TranslatorError) -> JSONResponse:
    """Structured error response for all translator exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


app.include_router(health_router, prefix="/v1")
app.include_router(languages_router, prefix="/v1")
app.include_router(translate_router, prefix="/v1")
app.include_router(speech_router, prefix="/v1")
