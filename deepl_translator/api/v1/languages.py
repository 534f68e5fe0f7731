"""Supported language endpoints."""

from fastapi import APIRouter, Depends

from deepl_translator.api.deps import get_language_catalog, get_translation_client
from deepl_translator.schemas.language import LanguageOut, LanguagesResponse
from deepl_translator.services.language.catalog import LanguageCatalog
from deepl_translator.services.translation.base import TranslationProvider

router = APIRouter(prefix="/languages", tags=["languages"])


@router.get("", response_model=LanguagesResponse)
async def list_languages(
    live: bool = False,
    provider: TranslationProvider = Depends(get_translation_client),
    language_catalog: LanguageCatalog = Depends(get_language_catalog),
) -> LanguagesResponse:
    """Static target languages, or the provider's live list with `live=true`.

    The live list falls back to a default set when the provider is
    unreachable, so this endpoint never fails on upstream errors.
    """
    if live:
        languages = await provider.get_supported_languages()
        source = "remote"
    else:
        languages = list(language_catalog.targets)
        source = "static"
    return LanguagesResponse(
        source=source,
        languages=[LanguageOut.model_validate(lang) for lang in languages],
    )
