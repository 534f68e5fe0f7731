"""Unit tests for TranslationOrchestrator.

Tests:
  - Source equal to target → immediate success, zero network calls
  - Two retryable failures then success → three attempt announcements, then 100%
  - 401 → exactly one attempt, AUTH_OR_QUOTA failure
  - Cancel during the backoff wait → prompt CANCELLED result
  - Batch of a, b, c where b fails → three entries in input order
  - Validation: blank text, unknown target, no network activity
  - The heuristic hint is never sent as source_lang
  - Detected label: remote, else hint, else AUTO
  - Last caller wins on one instance
  - Connectivity check failures never abort a translation
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from deepl_translator.core.exceptions import (
    AuthOrQuotaError,
    InvalidArgumentError,
    InvalidRequestError,
    NetworkError,
    ProviderError,
    ResponseParseError,
    TranslationCancelledError,
)
from deepl_translator.services.translation.base import (
    ProgressEvent,
    RawTranslation,
    TranslationResult,
)
from deepl_translator.services.translation.cancellation import CancelToken
from deepl_translator.services.translation.client import TranslationClient
from deepl_translator.services.translation.orchestrator import (
    AttemptOutcome,
    AttemptStatus,
    RetryDecision,
    TranslationOrchestrator,
    attempt_percent,
    decide,
)
from tests.conftest import FakeTranslationProvider, retryable_failure

SPANISH = "hola buenos días gracias"


async def _collect(orchestrator: TranslationOrchestrator, *args, **kwargs) -> list:
    return [event async for event in orchestrator.stream(*args, **kwargs)]


class TestDecide:
    """Tests for the pure retry decision."""

    def test_success_completes(self) -> None:
        assert decide(AttemptStatus.SUCCESS, 1, 3) is RetryDecision.COMPLETE

    def test_retryable_retries_until_last_attempt(self) -> None:
        assert decide(AttemptStatus.RETRYABLE, 1, 3) is RetryDecision.RETRY
        assert decide(AttemptStatus.RETRYABLE, 2, 3) is RetryDecision.RETRY
        assert decide(AttemptStatus.RETRYABLE, 3, 3) is RetryDecision.STOP

    @pytest.mark.parametrize("status", [AttemptStatus.TERMINAL, AttemptStatus.CANCELLED])
    def test_terminal_and_cancelled_stop(self, status: AttemptStatus) -> None:
        assert decide(status, 1, 3) is RetryDecision.STOP

    def test_outcome_from_error(self) -> None:
        assert AttemptOutcome.from_error(NetworkError("x")).status is AttemptStatus.RETRYABLE
        assert (
            AttemptOutcome.from_error(AuthOrQuotaError("no", 401)).status
            is AttemptStatus.TERMINAL
        )
        assert (
            AttemptOutcome.from_error(TranslationCancelledError()).status
            is AttemptStatus.CANCELLED
        )

    def test_attempt_percent(self) -> None:
        assert [attempt_percent(n, 3) for n in (1, 2, 3)] == [10, 36, 63]
        assert attempt_percent(1, 1) == 10


class TestShortCircuit:
    """Source resolved to the target language: no translation needed."""

    @pytest.mark.asyncio
    async def test_explicit_source_equals_target(self) -> None:
        provider = FakeTranslationProvider()
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        events = await _collect(orchestrator, "  Guten Tag  ", "DE", "de")

        assert events[0] == ProgressEvent(
            "Source and target languages match - no translation needed", 100
        )
        result = events[-1]
        assert isinstance(result, TranslationResult)
        assert result.success
        assert result.translated_text == "Guten Tag"
        assert result.detected_source_language == "DE"
        assert provider.request_calls == []
        assert provider.probe_calls == 0

    @pytest.mark.asyncio
    async def test_hint_equals_target(self) -> None:
        provider = FakeTranslationProvider()
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        result = await orchestrator.translate(SPANISH, "ES")

        assert result.translated_text == SPANISH
        assert result.detected_source_language == "ES"
        assert provider.request_calls == []

    @pytest.mark.asyncio
    async def test_regional_target_does_not_match_base_hint(self) -> None:
        provider = FakeTranslationProvider()
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        await orchestrator.translate("thank you for the help", "EN-US", "EN")

        assert len(provider.request_calls) == 1


class TestRetries:
    """Retry loop, backoff and progress reporting."""

    @pytest.mark.asyncio
    async def test_two_failures_then_success(self) -> None:
        provider = FakeTranslationProvider(
            outcomes=[
                retryable_failure(),
                retryable_failure(),
                RawTranslation("Hallo", "EN"),
            ]
        )
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)
        events: list = []

        result = await orchestrator.translate("Hello", "DE", on_event=events.append)

        progress = [e for e in events if isinstance(e, ProgressEvent)]
        assert [(e.attempt, e.percent) for e in progress] == [
            (1, 10),
            (2, 36),
            (3, 63),
            (None, 100),
        ]
        assert progress[0].message == "Attempt 1 of 3..."
        assert events[-1] is result
        assert result.success
        assert result.translated_text == "Hallo"
        assert len(provider.request_calls) == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_fail_with_last_error(self) -> None:
        provider = FakeTranslationProvider(
            outcomes=[retryable_failure() for _ in range(3)]
        )
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        events = await _collect(orchestrator, "Hello", "DE")

        result = events[-1]
        assert not result.success
        assert result.error_message == "Network error: Connection refused"
        assert isinstance(result.error, NetworkError)
        assert all(e.percent < 100 for e in events[:-1])
        assert len(provider.request_calls) == 3

    @pytest.mark.asyncio
    async def test_auth_failure_is_not_retried(self) -> None:
        provider = FakeTranslationProvider(
            outcomes=[AuthOrQuotaError("Invalid API key or authentication failed", 401)]
        )
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        with pytest.raises(AuthOrQuotaError):
            await orchestrator.translate("Hello", "DE")

        assert len(provider.request_calls) == 1

    @pytest.mark.asyncio
    async def test_invalid_request_is_not_retried(self) -> None:
        provider = FakeTranslationProvider(outcomes=[InvalidRequestError("bad")])
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        events = await _collect(orchestrator, "Hello", "DE")

        assert events[-1].error.code == "INVALID_REQUEST"
        assert len(provider.request_calls) == 1

    @pytest.mark.asyncio
    async def test_connectivity_check_failure_is_ignored(self) -> None:
        provider = FakeTranslationProvider(probe_error=NetworkError("down"))
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        result = await orchestrator.translate("Hello", "DE")

        assert result.success
        assert provider.probe_calls == 1

    @pytest.mark.asyncio
    async def test_undecodable_body_retried_and_completed(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            if request.url.path.endswith("/translate"):
                calls += 1
                return httpx.Response(
                    200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
                )
            return httpx.Response(200, json=[])

        client = TranslationClient(
            api_key="test-key-1234:fx", transport=httpx.MockTransport(handler)
        )
        orchestrator = TranslationOrchestrator(provider=client, retry_delay_seconds=0)
        events: list = []

        async with client:
            with pytest.raises(ResponseParseError):
                await orchestrator.translate("Hello", "DE", on_event=events.append)

        assert isinstance(events[-1], TranslationResult)
        assert events[-1].error.code == "RESPONSE_PARSE_ERROR"
        assert calls == 3

    @pytest.mark.asyncio
    async def test_unexpected_provider_exception_is_typed(self) -> None:
        provider = FakeTranslationProvider(
            outcomes=[KeyError("translations"), RawTranslation("Hallo", "EN")]
        )
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)
        events: list = []

        result = await orchestrator.translate("Hello", "DE", on_event=events.append)

        assert result.success
        assert events[-1] is result
        assert len(provider.request_calls) == 2

    @pytest.mark.asyncio
    async def test_unexpected_provider_exception_exhausts_retries(self) -> None:
        provider = FakeTranslationProvider(responder=lambda text: RuntimeError("boom"))
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        events = await _collect(orchestrator, "Hello", "DE")

        assert isinstance(events[-1].error, ProviderError)
        assert events[-1].error_message == "Unexpected translation provider error: boom"
        assert len(provider.request_calls) == 3

    def test_max_retries_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            TranslationOrchestrator(provider=FakeTranslationProvider(), max_retries=0)


class TestCancellation:
    """Cancellation through CancelToken."""

    @pytest.mark.asyncio
    async def test_cancel_during_backoff_finishes_promptly(self) -> None:
        provider = FakeTranslationProvider(
            outcomes=[retryable_failure() for _ in range(3)]
        )
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=5)
        token = CancelToken()

        task = asyncio.create_task(_collect(orchestrator, "Hello", "DE", cancel=token))
        await asyncio.sleep(0.05)
        token.cancel()
        events = await asyncio.wait_for(task, timeout=1.0)

        result = events[-1]
        assert not result.success
        assert result.cancelled
        assert result.error_message == "Operation cancelled by user"
        assert len(provider.request_calls) == 1

    @pytest.mark.asyncio
    async def test_cancel_during_request_abandons_it(self) -> None:
        provider = FakeTranslationProvider(delay_seconds=5)
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)
        token = CancelToken()

        task = asyncio.create_task(orchestrator.translate("Hello", "DE", cancel=token))
        await asyncio.sleep(0.05)
        token.cancel()

        with pytest.raises(TranslationCancelledError):
            await asyncio.wait_for(task, timeout=1.0)
        assert len(provider.request_calls) == 1

    @pytest.mark.asyncio
    async def test_raising_callback_releases_token(
        self, orchestrator: TranslationOrchestrator
    ) -> None:
        token = CancelToken()

        def on_event(event) -> None:
            raise ValueError("listener failed")

        with pytest.raises(ValueError, match="listener failed"):
            await orchestrator.translate("Hello", "DE", cancel=token, on_event=on_event)

        assert orchestrator._active is None
        assert not token.cancelled
        assert (await orchestrator.translate("Hello", "DE")).success

    @pytest.mark.asyncio
    async def test_pre_cancelled_token_makes_no_request(self) -> None:
        provider = FakeTranslationProvider()
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)
        token = CancelToken()
        token.cancel()

        events = await _collect(orchestrator, "Hello", "DE", cancel=token)

        assert events[-1].cancelled
        assert provider.request_calls == []

    @pytest.mark.asyncio
    async def test_last_caller_wins(self) -> None:
        provider = FakeTranslationProvider(delay_seconds=0.2)
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        first = asyncio.create_task(orchestrator.translate("Hello", "DE"))
        await asyncio.sleep(0.05)
        second = asyncio.create_task(orchestrator.translate("Good morning", "DE"))

        with pytest.raises(TranslationCancelledError):
            await first
        result = await second
        assert result.success
        assert result.translated_text == "Hallo Welt"


class TestRequestBuilding:
    """Validation and what reaches the provider."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_blank_text_rejected_without_network(self, text: str) -> None:
        provider = FakeTranslationProvider()
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        with pytest.raises(InvalidArgumentError) as exc_info:
            await orchestrator.translate(text, "DE")

        assert exc_info.value.field == "text"
        assert provider.request_calls == []
        assert provider.probe_calls == 0

    @pytest.mark.asyncio
    async def test_unknown_target_rejected(
        self, orchestrator: TranslationOrchestrator, fake_provider: FakeTranslationProvider
    ) -> None:
        events = await _collect(orchestrator, "Hello", "XX")

        assert len(events) == 1
        assert isinstance(events[0].error, InvalidArgumentError)
        assert events[0].error.field == "target"
        assert fake_provider.request_calls == []

    @pytest.mark.asyncio
    async def test_hint_is_never_sent_as_source(
        self, orchestrator: TranslationOrchestrator, fake_provider: FakeTranslationProvider
    ) -> None:
        await orchestrator.translate(SPANISH, "de")

        assert fake_provider.request_calls == [
            {
                "text": SPANISH,
                "target_language_code": "DE",
                "source_language_code": None,
            }
        ]

    @pytest.mark.asyncio
    async def test_explicit_source_is_sent_upper_cased(
        self, orchestrator: TranslationOrchestrator, fake_provider: FakeTranslationProvider
    ) -> None:
        await orchestrator.translate("  Hello  ", "DE", "en")

        call = fake_provider.request_calls[0]
        assert call["text"] == "Hello"
        assert call["source_language_code"] == "EN"

    @pytest.mark.asyncio
    async def test_auto_source_is_not_sent(
        self, orchestrator: TranslationOrchestrator, fake_provider: FakeTranslationProvider
    ) -> None:
        await orchestrator.translate("Hello", "DE", "auto")

        assert fake_provider.request_calls[0]["source_language_code"] is None

    def test_long_text_is_allowed(self) -> None:
        orchestrator = TranslationOrchestrator(
            provider=FakeTranslationProvider(), max_text_length=10
        )
        request = orchestrator.build_request("x" * 50, "DE")
        assert len(request.text) == 50


class TestDetectedLabel:
    """Which source language the result reports."""

    @pytest.mark.asyncio
    async def test_remote_label_wins(
        self, orchestrator: TranslationOrchestrator
    ) -> None:
        result = await orchestrator.translate(SPANISH, "DE")
        assert result.detected_source_language == "EN"

    @pytest.mark.asyncio
    async def test_hint_used_when_remote_silent(self) -> None:
        provider = FakeTranslationProvider(responder=lambda text: RawTranslation("Hallo"))
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        result = await orchestrator.translate(SPANISH, "DE")

        assert result.detected_source_language == "ES"

    @pytest.mark.asyncio
    async def test_auto_when_nothing_known(self) -> None:
        provider = FakeTranslationProvider(responder=lambda text: RawTranslation("Hallo"))
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        result = await orchestrator.translate("xyz 123", "DE")

        assert result.detected_source_language == "AUTO"


class TestTranslateMany:
    """Batch translation."""

    @pytest.mark.asyncio
    async def test_failed_item_does_not_abort_batch(self) -> None:
        def responder(text: str):
            if text == "b":
                return InvalidRequestError("bad")
            return RawTranslation(text.upper(), "EN")

        provider = FakeTranslationProvider(responder=responder)
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        results = await orchestrator.translate_many(["a", "b", "c"], "JA")

        assert [r.original for r in results] == ["a", "b", "c"]
        assert [r.success for r in results] == [True, False, True]
        assert results[0].translated_text == "A"
        assert results[1].translated_text == "Error: Invalid request parameters: bad"
        assert results[1].detected_source_language == "ERROR"
        assert results[1].error_message == "Invalid request parameters: bad"

    @pytest.mark.asyncio
    async def test_untyped_item_failure_does_not_abort_batch(self) -> None:
        def responder(text: str):
            if text == "b":
                return RuntimeError("socket closed")
            return RawTranslation(text.upper(), "EN")

        provider = FakeTranslationProvider(responder=responder)
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)

        results = await orchestrator.translate_many(["a", "b", "c"], "JA")

        assert [r.success for r in results] == [True, False, True]
        assert results[1].detected_source_language == "ERROR"
        assert results[1].error_message == (
            "Unexpected translation provider error: socket closed"
        )

    @pytest.mark.asyncio
    async def test_order_kept_when_items_finish_out_of_order(self) -> None:
        delays = {"first": 0.06, "second": 0.03, "third": 0.0}

        class SlowProvider(FakeTranslationProvider):
            async def request(self, text, target_language_code, source_language_code=None, cancel=None):
                await asyncio.sleep(delays[text])
                return RawTranslation(f"{text}!", "EN")

        orchestrator = TranslationOrchestrator(
            provider=SlowProvider(), retry_delay_seconds=0, max_concurrency=3
        )

        results = await orchestrator.translate_many(["first", "second", "third"], "JA")

        assert [r.translated_text for r in results] == ["first!", "second!", "third!"]

    @pytest.mark.asyncio
    async def test_cancelled_batch_raises(self) -> None:
        provider = FakeTranslationProvider()
        orchestrator = TranslationOrchestrator(provider=provider, retry_delay_seconds=0)
        token = CancelToken()
        token.cancel()

        with pytest.raises(TranslationCancelledError):
            await orchestrator.translate_many(["a", "b"], "JA", cancel=token)
        assert provider.request_calls == []

    @pytest.mark.asyncio
    async def test_empty_batch(self, orchestrator: TranslationOrchestrator) -> None:
        assert await orchestrator.translate_many([], "DE") == []
