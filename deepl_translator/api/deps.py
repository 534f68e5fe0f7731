"""Shared FastAPI dependencies.

The TranslationClient is created once during the FastAPI lifespan and
stored on app.state; the speech synthesizer is created there on first use. Each request gets its own TranslationOrchestrator over
that client: an orchestrator cancels its previous call when a new one
starts, so sharing one across HTTP requests would let them cancel each other.
"""

from fastapi import Depends, Request

from deepl_translator.core.config import settings
from deepl_translator.services.language.catalog import LanguageCatalog, catalog
from deepl_translator.services.speech.base import SpeechSynthesizer
from deepl_translator.services.speech.pyttsx3_engine import Pyttsx3Synthesizer
from deepl_translator.services.translation.base import TranslationProvider
from deepl_translator.services.translation.orchestrator import TranslationOrchestrator


def get_translation_client(request: Request) -> TranslationProvider:
    """Return the app-wide translation provider."""
    return request.app.state.translation_client


def get_speech_synthesizer(request: Request) -> SpeechSynthesizer:
    """Return the app-wide synthesizer, starting the engine on first use.

    The platform speech driver is only needed by /speak, so a host without
    one still serves translations. Raises SpeechError if it cannot start.
    """
    synthesizer = getattr(request.app.state, "speech_synthesizer", None)
    if synthesizer is None:
        synthesizer = Pyttsx3Synthesizer()
        request.app.state.speech_synthesizer = synthesizer
    return synthesizer


def get_language_catalog() -> LanguageCatalog:
    return catalog


def get_orchestrator(
    provider: TranslationProvider = Depends(get_translation_client),
    language_catalog: LanguageCatalog = Depends(get_language_catalog),
) -> TranslationOrchestrator:
    """Build a per-request orchestrator from settings."""
    return TranslationOrchestrator(
        provider=provider,
        language_catalog=language_catalog,
        max_retries=settings.max_retries,
        retry_delay_seconds=settings.retry_delay_seconds,
        max_text_length=settings.max_text_length,
    )
