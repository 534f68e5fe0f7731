"""Text-to-speech endpoint."""

import structlog
from fastapi import APIRouter, Depends

from deepl_translator.api.deps import get_speech_synthesizer
from deepl_translator.schemas.speech import SpeakRequest, SpeakResponse
from deepl_translator.services.speech.base import (
    MAX_SPOKEN_CHARS,
    SpeechSynthesizer,
    voice_locale_for,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["speech"])


@router.post("/speak", response_model=SpeakResponse)
async def speak(
    body: SpeakRequest,
    synthesizer: SpeechSynthesizer = Depends(get_speech_synthesizer),
) -> SpeakResponse:
    """Speak text on the server's audio device with a matching voice.

    Blank text answers 400; a missing or failing speech engine answers
    SPEECH_FAILED through the translator error handler.
    """
    language_code = body.language_code.strip().upper()
    await synthesizer.speak(body.text, language_code)
    logger.info("speech_completed", language_code=language_code, text_len=len(body.text))
    return SpeakResponse(
        language_code=language_code,
        voice_locale=voice_locale_for(language_code),
        truncated=len(body.text) > MAX_SPOKEN_CHARS,
    )
