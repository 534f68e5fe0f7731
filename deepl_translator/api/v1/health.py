"""Health check endpoint."""

import structlog
from fastapi import APIRouter, Depends

from deepl_translator.api.deps import get_translation_client
from deepl_translator.core.config import settings
from deepl_translator.core.exceptions import TranslatorError
from deepl_translator.schemas.health import HealthResponse
from deepl_translator.services.translation.base import TranslationProvider

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    provider: TranslationProvider = Depends(get_translation_client),
) -> HealthResponse:
    """Report config sanity and whether the translation API answers."""
    upstream_status: int | None = None
    try:
        upstream_status = await provider.probe()
    except TranslatorError as e:
        logger.warning("health_probe_failed", error=e.message)

    return HealthResponse(
        app=settings.app_name,
        version=settings.app_version,
        api_key_valid=settings.has_valid_api_key,
        using_default_api_key=settings.uses_default_api_key,
        upstream_reachable=upstream_status is not None and upstream_status < 500,
        upstream_status=upstream_status,
    )
