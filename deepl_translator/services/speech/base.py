"""Abstract speech synthesizer interface.

The translation core never speaks; callers hand the translated text and
the target language code to a SpeechSynthesizer.
"""

from abc import ABC, abstractmethod

from deepl_translator.core.exceptions import InvalidArgumentError

MAX_SPOKEN_CHARS = 1000
DEFAULT_VOICE_LOCALE = "en-US"

VOICE_LOCALES = {
    "EN": "en-US",
    "EN-US": "en-US",
    "EN-GB": "en-GB",
    "ES": "es-ES",
    "FR": "fr-FR",
    "DE": "de-DE",
    "IT": "it-IT",
    "PT": "pt-PT",
    "PT-PT": "pt-PT",
    "PT-BR": "pt-BR",
    "RU": "ru-RU",
    "JA": "ja-JP",
    "ZH": "zh-CN",
    "KO": "ko-KR",
    "NL": "nl-NL",
    "PL": "pl-PL",
    "SV": "sv-SE",
    "DA": "da-DK",
    "NO": "nb-NO",
    "FI": "fi-FI",
}


def voice_locale_for(language_code: str | None) -> str:
    """Map a DeepL language code to a voice locale (EN-GB → en-GB)."""
    return VOICE_LOCALES.get((language_code or "").strip().upper(), DEFAULT_VOICE_LOCALE)


def prepare_text(text: str) -> str:
    """Reject blank text and cap long text at MAX_SPOKEN_CHARS."""
    if not text or not text.strip():
        raise InvalidArgumentError("text", "Text to speak cannot be null or empty")
    if len(text) > MAX_SPOKEN_CHARS:
        return text[:MAX_SPOKEN_CHARS] + "..."
    return text


class SpeechSynthesizer(ABC):
    """Abstract base class for text-to-speech backends."""

    @abstractmethod
    async def speak(self, text: str, language_code: str = "EN-US") -> None:
        """Speak `text` with a voice matching `language_code`.

        Raises:
            InvalidArgumentError: Blank text.
            SpeechError: No usable voice, or the backend failed.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop any speech in progress."""
        ...

    @abstractmethod
    def available_voices(self) -> list[str]:
        """Human-readable list of installed voices."""
        ...
