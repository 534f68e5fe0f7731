"""Custom exception classes for structured error handling.

Every failure the translation core can surface is a TranslatorError.
`retryable` tells the orchestrator whether another attempt may succeed;
`status_code` is what the HTTP API answers with.
"""

from typing import Any


class TranslatorError(Exception):
    """Base exception for all translator errors."""

    retryable: bool = False

    def __init__(self, code: str, message: str, status_code: int = 500) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class InvalidArgumentError(TranslatorError):
    """Bad caller input. Raised before any network activity."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(
            code="INVALID_ARGUMENT",
            message=message or f"Invalid argument: {field}",
            status_code=400,
        )


class AuthOrQuotaError(TranslatorError):
    """401/403 from the translation API. Retrying will not help."""

    def __init__(self, message: str, upstream_status: int) -> None:
        self.upstream_status = upstream_status
        super().__init__(code="AUTH_OR_QUOTA", message=message, status_code=403)


class InvalidRequestError(TranslatorError):
    def __init__(self, body: str) -> None:
        self.body = body
        super().__init__(
            code="INVALID_REQUEST",
            message=f"Invalid request parameters: {body}",
            status_code=400,
        )


class RateLimitedError(TranslatorError):
    retryable = True

    def __init__(
        self, message: str = "Rate limit exceeded, please try again later"
    ) -> None:
        super().__init__(code="RATE_LIMITED", message=message, status_code=429)


class NetworkError(TranslatorError):
    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(
            code="NETWORK_ERROR", message=f"Network error: {message}", status_code=503
        )


class ResponseParseError(TranslatorError):
    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(
            code="RESPONSE_PARSE_ERROR",
            message=f"Failed to parse API response: {message}",
            status_code=502,
        )


class ApiError(TranslatorError):
    """Any other non-2xx answer from the translation API."""

    retryable = True

    def __init__(self, upstream_status: int, body: str) -> None:
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(
            code="API_ERROR",
            message=f"API Error ({upstream_status}): {body}",
            status_code=502,
        )


class ProviderError(TranslatorError):
    """A provider failed with something other than a TranslatorError."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(
            code="PROVIDER_ERROR",
            message=f"Unexpected translation provider error: {message}",
            status_code=502,
        )


class EmptyResponseError(TranslatorError):
    retryable = True

    def __init__(self, message: str = "Empty response from translation API") -> None:
        super().__init__(code="EMPTY_RESPONSE", message=message, status_code=502)


class NoTranslationsError(TranslatorError):
    retryable = True

    def __init__(
        self, message: str = "No translations returned from translation API"
    ) -> None:
        super().__init__(code="NO_TRANSLATIONS", message=message, status_code=502)


class EmptyTranslationTextError(TranslatorError):
    retryable = True

    def __init__(self, message: str = "Empty translation text received") -> None:
        super().__init__(
            code="EMPTY_TRANSLATION_TEXT", message=message, status_code=502
        )


class TranslationCancelledError(TranslatorError):
    """User-initiated cancellation. Kept apart from real failures."""

    def __init__(self, message: str = "Operation cancelled by user") -> None:
        super().__init__(code="CANCELLED", message=message, status_code=499)


class SpeechError(TranslatorError):
    def __init__(self, message: str = "Text-to-speech failed") -> None:
        super().__init__(code="SPEECH_FAILED", message=message, status_code=500)
