"""Shared pytest fixtures for the translator test suite.

Provides:
  - FakeTranslationProvider: scripted TranslationProvider with call tracking
  - FakeVoice / FakeSpeechEngine: stand-ins for pyttsx3 objects
  - fake_provider: default fake returning a fixed translation
  - orchestrator: TranslationOrchestrator over fake_provider, no backoff delay

No test talks to the real translation API.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from deepl_translator.core.exceptions import NetworkError
from deepl_translator.services.language.catalog import (
    DEFAULT_REMOTE_LANGUAGES,
    LanguageInfo,
)
from deepl_translator.services.translation.base import (
    RawTranslation,
    TranslationProvider,
)
from deepl_translator.services.translation.cancellation import CancelToken
from deepl_translator.services.translation.orchestrator import TranslationOrchestrator

Outcome = RawTranslation | Exception


# ---------------------------------------------------------------------------
# Fake translation provider
# ---------------------------------------------------------------------------


class FakeTranslationProvider(TranslationProvider):
    """Scripted provider.

    `outcomes` are consumed one per request() call; after they run out,
    `responder(text)` (or a fixed default translation) answers.
    """

    def __init__(
        self,
        outcomes: list[Outcome] | None = None,
        responder: Callable[[str], Outcome] | None = None,
        delay_seconds: float = 0.0,
        probe_error: Exception | None = None,
    ) -> None:
        self._outcomes = list(outcomes or [])
        self._responder = responder
        self._delay = delay_seconds
        self._probe_error = probe_error
        self.request_calls: list[dict[str, Any]] = []
        self.probe_calls = 0

    async def request(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None = None,
        cancel: CancelToken | None = None,
    ) -> RawTranslation:
        self.request_calls.append(
            {
                "text": text,
                "target_language_code": target_language_code,
                "source_language_code": source_language_code,
            }
        )
        if self._delay:
            if cancel is not None:
                await cancel.run(asyncio.sleep(self._delay))
            else:
                await asyncio.sleep(self._delay)

        if self._outcomes:
            outcome = self._outcomes.pop(0)
        elif self._responder is not None:
            outcome = self._responder(text)
        else:
            outcome = RawTranslation(text="Hallo Welt", detected_source_language="EN")

        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def probe(self, cancel: CancelToken | None = None) -> int:
        self.probe_calls += 1
        if self._probe_error is not None:
            raise self._probe_error
        return 200

    async def get_supported_languages(self) -> list[LanguageInfo]:
        return list(DEFAULT_REMOTE_LANGUAGES)


def retryable_failure() -> NetworkError:
    return NetworkError("Connection refused")


# ---------------------------------------------------------------------------
# Fake pyttsx3 engine
# ---------------------------------------------------------------------------


class FakeVoice:
    def __init__(self, voice_id: str, name: str, languages: list[Any]) -> None:
        self.id = voice_id
        self.name = name
        self.languages = languages


class FakeSpeechEngine:
    """Records pyttsx3 calls instead of producing audio."""

    def __init__(self, voices: list[FakeVoice] | None = None) -> None:
        self.voices = voices if voices is not None else []
        self.properties: dict[str, Any] = {}
        self.spoken: list[str] = []
        self.stopped = False

    def getProperty(self, name: str) -> Any:
        if name == "voices":
            return self.voices
        return self.properties.get(name)

    def setProperty(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def say(self, text: str) -> None:
        self.spoken.append(text)

    def runAndWait(self) -> None:
        return None

    def stop(self) -> None:
        self.stopped = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_provider() -> FakeTranslationProvider:
    """Provider that always answers 'Hallo Welt' detected as EN."""
    return FakeTranslationProvider()


@pytest.fixture
def orchestrator(fake_provider: FakeTranslationProvider) -> TranslationOrchestrator:
    """Orchestrator over fake_provider with zero backoff delay."""
    return TranslationOrchestrator(provider=fake_provider, retry_delay_seconds=0)
