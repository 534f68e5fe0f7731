"""Translation data types and the abstract provider interface.

The orchestrator only talks to a TranslationProvider, never to a concrete
HTTP client, so tests swap in a fake provider. The concrete provider is
created once in the FastAPI lifespan and injected via Depends().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Union

from deepl_translator.core.exceptions import TranslatorError
from deepl_translator.services.language.catalog import LanguageInfo
from deepl_translator.services.translation.cancellation import CancelToken


@dataclass(frozen=True)
class TranslationRequest:
    """Validated input of one translate call."""

    text: str
    target_language_code: str
    source_language_code: str | None = None


@dataclass(frozen=True)
class RawTranslation:
    """One successful answer from the provider, before label resolution."""

    text: str
    detected_source_language: str | None = None


@dataclass(frozen=True)
class ProgressEvent:
    """Transient progress report. `attempt` is set on attempt announcements."""

    message: str
    percent: int
    attempt: int | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.percent <= 100:
            raise ValueError(f"percent must be within 0..100, got {self.percent}")


@dataclass(frozen=True)
class TranslationResult:
    """Terminal outcome of one translate call. Produced exactly once."""

    translated_text: str
    detected_source_language: str
    success: bool
    error_message: str | None = None
    error: TranslatorError | None = field(default=None, repr=False, compare=False)

    @classmethod
    def failure(cls, error: TranslatorError) -> TranslationResult:
        return cls(
            translated_text="",
            detected_source_language="",
            success=False,
            error_message=error.message,
            error=error,
        )

    @property
    def cancelled(self) -> bool:
        return self.error is not None and self.error.code == "CANCELLED"


@dataclass(frozen=True)
class BatchItemResult:
    """One entry of translate_many(), in input order."""

    original: str
    translated_text: str
    detected_source_language: str
    success: bool
    error_message: str | None = None


TranslationEvent = Union[ProgressEvent, TranslationResult]


class TranslationProvider(ABC):
    """Abstract base class for remote translation services."""

    @abstractmethod
    async def request(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None = None,
        cancel: CancelToken | None = None,
    ) -> RawTranslation:
        """Run exactly one translation attempt. Never retries.

        Args:
            text: Text to translate, already trimmed.
            target_language_code: Target code; sent upper-cased.
            source_language_code: Explicit source code, or None to let the
                service detect it.
            cancel: Token that abandons the request when cancelled.

        Returns:
            RawTranslation with the translated text and the source language
            the service reported, if any.

        Raises:
            TranslatorError: A classified failure. `retryable` tells the
                caller whether another attempt may help.
        """
        ...

    @abstractmethod
    async def probe(self, cancel: CancelToken | None = None) -> int:
        """Lightweight reachability check. Returns the HTTP status code."""
        ...

    @abstractmethod
    async def get_supported_languages(self) -> list[LanguageInfo]:
        """Live target-language list, or a default list on any failure."""
        ...
