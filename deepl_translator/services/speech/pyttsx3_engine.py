"""Offline text-to-speech through pyttsx3 (SAPI5 / NSSpeech / eSpeak).

Voice choice: the first installed voice whose language matches the target
locale, else one matching the bare language, else the first voice.
pyttsx3's runAndWait() blocks, so speaking runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pyttsx3
import structlog

from deepl_translator.core.exceptions import SpeechError
from deepl_translator.services.speech.base import (
    SpeechSynthesizer,
    prepare_text,
    voice_locale_for,
)

logger = structlog.get_logger(__name__)

_RATE_WORDS_PER_MINUTE = 170
_VOLUME = 1.0


def _voice_languages(voice: Any) -> list[str]:
    """Normalized language tags of a pyttsx3 voice.

    eSpeak reports tags as bytes with a leading priority byte (b"\\x05en-us").
    """
    tags: list[str] = []
    for lang in getattr(voice, "languages", None) or []:
        if isinstance(lang, bytes):
            lang = lang.decode("utf-8", errors="ignore")
        tag = "".join(ch for ch in str(lang) if ch.isprintable()).strip()
        if tag:
            tags.append(tag.lower().replace("_", "-"))
    return tags


def select_voice(voices: list[Any], locale: str) -> Any | None:
    """Pick the best voice for `locale` (e.g. "pt-BR"), or None if no voices."""
    if not voices:
        return None
    wanted = locale.lower()
    base = wanted.split("-")[0]

    for voice in voices:
        if any(tag.startswith(wanted) for tag in _voice_languages(voice)):
            return voice
    for voice in voices:
        if any(tag.split("-")[0] == base for tag in _voice_languages(voice)):
            return voice
    for voice in voices:
        # SAPI5 exposes the culture only in the token id: ..._EN-US_ZIRA_11.0
        if wanted in str(getattr(voice, "id", "")).lower():
            return voice
    return voices[0]


def _init_engine() -> Any:
    """Start the platform driver. Hosts without one raise SpeechError."""
    try:
        return pyttsx3.init()
    except (RuntimeError, OSError) as e:
        logger.error("speech_engine_unavailable", error=str(e))
        raise SpeechError(f"Text-to-speech engine unavailable: {e}") from e


class Pyttsx3Synthesizer(SpeechSynthesizer):
    """pyttsx3-backed synthesizer. Pass `engine` to reuse or fake one."""

    def __init__(self, engine: Any | None = None) -> None:
        self._engine = engine if engine is not None else _init_engine()

    def _voices(self) -> list[Any]:
        return list(self._engine.getProperty("voices") or [])

    def _say(self, text: str) -> None:
        self._engine.say(text)
        self._engine.runAndWait()

    async def speak(self, text: str, language_code: str = "EN-US") -> None:
        text = prepare_text(text)
        locale = voice_locale_for(language_code)

        voice = select_voice(self._voices(), locale)
        if voice is None:
            raise SpeechError("No text-to-speech voices are installed on this system")

        logger.debug(
            "speech_voice_selected",
            language_code=language_code,
            locale=locale,
            voice=getattr(voice, "name", voice.id),
        )
        try:
            self._engine.setProperty("voice", voice.id)
            self._engine.setProperty("rate", _RATE_WORDS_PER_MINUTE)
            self._engine.setProperty("volume", _VOLUME)
            await asyncio.to_thread(self._say, text)
        except (RuntimeError, OSError) as e:
            logger.error("speech_failed", error=str(e), locale=locale)
            raise SpeechError(f"Text-to-speech failed: {e}") from e

    def stop(self) -> None:
        self._engine.stop()

    def available_voices(self) -> list[str]:
        voices = []
        for voice in self._voices():
            languages = ", ".join(_voice_languages(voice)) or "unknown"
            voices.append(f"{getattr(voice, 'name', voice.id)} ({languages})")
        return voices
