"""Translation orchestration: validation, source resolution, retries, progress.

A call produces a well-typed event sequence: zero or more ProgressEvent
values followed by exactly one TranslationResult. `stream()` exposes that
sequence directly; `translate()` consumes it, forwards every event to an
optional callback, and returns the result or raises its error.

Flow of one call:
1. Validate text and target language (no network on failure)
2. Resolve the source: explicit code, else the heuristic hint
3. Short-circuit when source equals target
4. Connectivity probe (diagnostic only)
5. Up to max_retries attempts with linear backoff

Each attempt is reduced to an AttemptOutcome tag, and `decide()` maps
(tag, attempt, max_retries) to the next step.

The short-circuit compares the local hint, never the language the API
reports: a wrong guess can skip a real translation. That policy is kept
as-is.
"""

from __future__ import annotations

import asyncio
import os
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, Sequence

import structlog

from deepl_translator.core.exceptions import (
    InvalidArgumentError,
    ProviderError,
    TranslationCancelledError,
    TranslatorError,
)
from deepl_translator.services.language.catalog import (
    AUTO,
    LanguageCatalog,
    catalog as default_catalog,
)
from deepl_translator.services.language.detector import HeuristicLanguageDetector
from deepl_translator.services.translation.base import (
    BatchItemResult,
    ProgressEvent,
    RawTranslation,
    TranslationEvent,
    TranslationProvider,
    TranslationRequest,
    TranslationResult,
)
from deepl_translator.services.translation.cancellation import CancelToken

logger = structlog.get_logger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 1.0
MAX_TEXT_LENGTH = 5000
BATCH_ERROR_LABEL = "ERROR"


class AttemptStatus(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"
    CANCELLED = "cancelled"


class RetryDecision(str, Enum):
    COMPLETE = "complete"
    RETRY = "retry"
    STOP = "stop"


@dataclass(frozen=True)
class AttemptOutcome:
    """Tagged result of a single provider attempt."""

    status: AttemptStatus
    translation: RawTranslation | None = None
    error: TranslatorError | None = None

    @classmethod
    def from_error(cls, error: TranslatorError) -> AttemptOutcome:
        if isinstance(error, TranslationCancelledError):
            status = AttemptStatus.CANCELLED
        elif error.retryable:
            status = AttemptStatus.RETRYABLE
        else:
            status = AttemptStatus.TERMINAL
        return cls(status=status, error=error)


def decide(status: AttemptStatus, attempt: int, max_retries: int) -> RetryDecision:
    """Next step of the retry loop. Pure function of the attempt tag."""
    if status is AttemptStatus.SUCCESS:
        return RetryDecision.COMPLETE
    if status is AttemptStatus.RETRYABLE and attempt < max_retries:
        return RetryDecision.RETRY
    return RetryDecision.STOP


def attempt_percent(attempt: int, max_retries: int) -> int:
    """Progress for an attempt announcement: starts at 10, never reaches 100."""
    return 10 + (attempt - 1) * 80 // max_retries


class TranslationOrchestrator:
    """Public entry point of the translation core.

    One call in flight per instance: starting a new call cancels the token
    of the previous one (last caller wins). Nothing is queued or rejected.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        detector: HeuristicLanguageDetector | None = None,
        language_catalog: LanguageCatalog | None = None,
        max_retries: int = MAX_RETRIES,
        retry_delay_seconds: float = RETRY_DELAY_SECONDS,
        max_text_length: int = MAX_TEXT_LENGTH,
        max_concurrency: int | None = None,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._provider = provider
        self._detector = detector or HeuristicLanguageDetector()
        self._catalog = language_catalog or default_catalog
        self._max_retries = max_retries
        self._retry_delay = retry_delay_seconds
        self._max_text_length = max_text_length
        self._max_concurrency = max_concurrency or os.cpu_count() or 1
        self._active: CancelToken | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def translate(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None = None,
        cancel: CancelToken | None = None,
        on_event: Callable[[TranslationEvent], None] | None = None,
    ) -> TranslationResult:
        """Translate one text.

        Args:
            text: Raw user text. Trimmed before sending.
            target_language_code: Must exist in the language catalog.
            source_language_code: Explicit source, or None / "AUTO" to let
                the heuristic hint and the API decide.
            cancel: Token the caller can cancel. A fresh one is used if None.
            on_event: Receives every ProgressEvent and the final result.

        Returns:
            The successful TranslationResult.

        Raises:
            InvalidArgumentError: Blank text or unknown target.
            TranslationCancelledError: The token was cancelled.
            TranslatorError: Any other terminal failure, after retries.
        """
        result: TranslationResult | None = None
        # aclosing: a raising on_event still releases the token right away.
        async with aclosing(
            self.stream(text, target_language_code, source_language_code, cancel)
        ) as events:
            async for event in events:
                if on_event is not None:
                    on_event(event)
                if isinstance(event, TranslationResult):
                    result = event

        if result is None:
            raise RuntimeError("translation stream ended without a result")
        if result.error is not None:
            raise result.error
        return result

    async def stream(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None = None,
        cancel: CancelToken | None = None,
    ) -> AsyncIterator[TranslationEvent]:
        """Yield progress events, then exactly one TranslationResult.

        Failures never raise here: they arrive as a failed result whose
        `error` holds the typed exception.
        """
        token = self._claim(cancel)
        try:
            async with aclosing(
                self._run(text, target_language_code, source_language_code, token)
            ) as events:
                async for event in events:
                    yield event
        finally:
            self._release(token)

    async def translate_many(
        self,
        texts: Sequence[str],
        target_language_code: str,
        source_language_code: str | None = None,
        cancel: CancelToken | None = None,
    ) -> list[BatchItemResult]:
        """Translate several texts concurrently, keeping input order.

        Concurrency is bounded by max_concurrency (CPU count by default).
        A failed item becomes an error-tagged entry instead of aborting the
        batch. asyncio.gather collects results by position, so the output
        order matches the input whatever order items finish in.

        Raises:
            TranslationCancelledError: The shared token was cancelled.
        """
        token = self._claim(cancel)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _one(text: str) -> BatchItemResult:
            async with semaphore:
                result = await self._final_result(
                    text, target_language_code, source_language_code, token
                )
            if result.success:
                return BatchItemResult(
                    original=text,
                    translated_text=result.translated_text,
                    detected_source_language=result.detected_source_language,
                    success=True,
                )
            return BatchItemResult(
                original=text,
                translated_text=f"Error: {result.error_message}",
                detected_source_language=BATCH_ERROR_LABEL,
                success=False,
                error_message=result.error_message,
            )

        try:
            results = await asyncio.gather(*(_one(text) for text in texts))
        finally:
            self._release(token)

        if token.cancelled:
            logger.info("batch_translation_cancelled", total=len(texts))
            raise TranslationCancelledError()

        logger.info(
            "batch_translation_complete",
            total=len(results),
            failed=sum(1 for r in results if not r.success),
        )
        return list(results)

    def build_request(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None = None,
    ) -> TranslationRequest:
        """Validate caller input. Raises InvalidArgumentError."""
        if text is None or not text.strip():
            raise InvalidArgumentError("text", "Text to translate cannot be empty")
        if not self._catalog.is_supported(target_language_code):
            raise InvalidArgumentError(
                "target", f"Unsupported target language: {target_language_code!r}"
            )

        trimmed = text.strip()
        if len(trimmed) > self._max_text_length:
            # Soft limit: the user may choose to send long text anyway.
            logger.warning(
                "text_exceeds_recommended_length",
                text_len=len(trimmed),
                max_text_length=self._max_text_length,
            )

        source = (source_language_code or "").strip().upper()
        return TranslationRequest(
            text=trimmed,
            target_language_code=target_language_code.strip().upper(),
            source_language_code=source if source and source != AUTO else None,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _claim(self, cancel: CancelToken | None) -> CancelToken:
        token = cancel or CancelToken()
        previous = self._active
        if previous is not None and previous is not token and not previous.cancelled:
            logger.info("previous_translation_cancelled")
            previous.cancel()
        self._active = token
        return token

    def _release(self, token: CancelToken) -> None:
        if self._active is token:
            self._active = None

    def _resolve_hint(self, request: TranslationRequest) -> str | None:
        if request.source_language_code:
            return request.source_language_code
        detected = self._detector.detect(request.text)
        return None if detected == AUTO else detected

    async def _final_result(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None,
        cancel: CancelToken,
    ) -> TranslationResult:
        result: TranslationResult | None = None
        async with aclosing(
            self._run(text, target_language_code, source_language_code, cancel)
        ) as events:
            async for event in events:
                if isinstance(event, TranslationResult):
                    result = event
        if result is None:
            raise RuntimeError("translation stream ended without a result")
        return result

    async def _run(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None,
        cancel: CancelToken,
    ) -> AsyncIterator[TranslationEvent]:
        try:
            request = self.build_request(
                text, target_language_code, source_language_code
            )
        except InvalidArgumentError as e:
            logger.warning("translation_rejected", field=e.field, error=e.message)
            yield TranslationResult.failure(e)
            return

        hint = self._resolve_hint(request)
        logger.info(
            "translation_started",
            text_len=len(request.text),
            source=request.source_language_code or AUTO,
            hint=hint,
            target=request.target_language_code,
        )

        if hint is not None and hint.upper() == request.target_language_code:
            logger.info("translation_skipped_same_language", language=hint)
            yield ProgressEvent("Source and target languages match - no translation needed", 100)
            yield TranslationResult(
                translated_text=request.text,
                detected_source_language=hint,
                success=True,
            )
            return

        try:
            await self._check_connectivity(cancel)
        except TranslationCancelledError as e:
            yield self._failed(AttemptOutcome.from_error(e), attempt=0)
            return

        for attempt in range(1, self._max_retries + 1):
            yield ProgressEvent(
                f"Attempt {attempt} of {self._max_retries}...",
                attempt_percent(attempt, self._max_retries),
                attempt=attempt,
            )
            outcome = await self._attempt(request, cancel, attempt)
            decision = decide(outcome.status, attempt, self._max_retries)

            if decision is RetryDecision.COMPLETE:
                yield ProgressEvent("Translation completed", 100)
                yield self._succeeded(outcome.translation, hint, attempt)
                return
            if decision is RetryDecision.STOP:
                yield self._failed(outcome, attempt)
                return

            delay = self._retry_delay * attempt
            logger.info(
                "translation_retry_scheduled",
                attempt=attempt,
                next_attempt=attempt + 1,
                delay_seconds=delay,
            )
            try:
                await cancel.sleep(delay)
            except TranslationCancelledError as e:
                yield self._failed(AttemptOutcome.from_error(e), attempt)
                return

    async def _check_connectivity(self, cancel: CancelToken) -> None:
        """Best-effort probe. Only cancellation escapes."""
        try:
            status_code = await self._provider.probe(cancel)
            logger.debug("connectivity_check_ok", status_code=status_code)
        except TranslationCancelledError:
            raise
        except Exception as e:
            logger.warning("connectivity_check_failed", error=str(e))

    async def _attempt(
        self, request: TranslationRequest, cancel: CancelToken, attempt: int
    ) -> AttemptOutcome:
        if cancel.cancelled:
            return AttemptOutcome.from_error(TranslationCancelledError())
        try:
            translation = await self._provider.request(
                request.text,
                request.target_language_code,
                request.source_language_code,
                cancel,
            )
        except TranslatorError as e:
            logger.warning(
                "translation_attempt_failed",
                attempt=attempt,
                code=e.code,
                error=e.message,
            )
            return AttemptOutcome.from_error(e)
        except Exception as e:
            logger.exception(
                "translation_attempt_crashed",
                attempt=attempt,
                error_type=type(e).__name__,
            )
            return AttemptOutcome.from_error(
                ProviderError(str(e) or type(e).__name__)
            )
        return AttemptOutcome(status=AttemptStatus.SUCCESS, translation=translation)

    def _succeeded(
        self, translation: RawTranslation | None, hint: str | None, attempt: int
    ) -> TranslationResult:
        if translation is None:
            raise RuntimeError("successful attempt without a translation")
        detected = translation.detected_source_language or hint or AUTO
        logger.info(
            "translation_succeeded",
            attempt=attempt,
            detected=detected,
            remote_detected=translation.detected_source_language,
            hint=hint,
        )
        return TranslationResult(
            translated_text=translation.text,
            detected_source_language=detected,
            success=True,
        )

    def _failed(self, outcome: AttemptOutcome, attempt: int) -> TranslationResult:
        error = outcome.error or TranslatorError("UNKNOWN", "Translation failed")
        if outcome.status is AttemptStatus.CANCELLED:
            logger.info("translation_cancelled", attempt=attempt)
        else:
            logger.error(
                "translation_failed",
                attempt=attempt,
                status=outcome.status.value,
                code=error.code,
                error=error.message,
            )
        return TranslationResult.failure(error)
