"""DeepL v2 HTTP client.

One attempt per call, no retries: retrying is the orchestrator's job.
Every failure is classified into a TranslatorError subclass so callers
never handle httpx exceptions directly.

Endpoints:
    POST {base}/translate            form-encoded text, target_lang, source_lang
    GET  {base}/languages?type=target connectivity probe + live language list
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from deepl_translator.core.exceptions import (
    ApiError,
    AuthOrQuotaError,
    EmptyResponseError,
    EmptyTranslationTextError,
    InvalidArgumentError,
    InvalidRequestError,
    NetworkError,
    NoTranslationsError,
    RateLimitedError,
    ResponseParseError,
    TranslatorError,
)
from deepl_translator.services.language.catalog import (
    DEFAULT_REMOTE_LANGUAGES,
    LanguageInfo,
    catalog,
)
from deepl_translator.services.translation.base import (
    RawTranslation,
    TranslationProvider,
)
from deepl_translator.services.translation.cancellation import CancelToken

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api-free.deepl.com/v2"
DEFAULT_AUTH_SCHEME = "DeepL-Auth-Key"
_TIMEOUT_SECONDS = 30.0


def _classify_status(status_code: int, body: str) -> TranslatorError:
    """Map a non-2xx answer to the error the orchestrator acts on."""
    if status_code == 401:
        return AuthOrQuotaError("Invalid API key or authentication failed", 401)
    if status_code == 403:
        return AuthOrQuotaError("API key quota exceeded or access denied", 403)
    if status_code == 400:
        return InvalidRequestError(body)
    if status_code == 429:
        return RateLimitedError()
    return ApiError(status_code, body)


def parse_translation_body(body: str) -> RawTranslation:
    """Parse `{"translations": [{"text", "detected_source_language"}]}`."""
    if not body or not body.strip():
        raise EmptyResponseError()
    try:
        payload: Any = json.loads(body)
    except json.JSONDecodeError as e:
        raise ResponseParseError(str(e)) from e
    if not isinstance(payload, dict):
        raise ResponseParseError("expected a JSON object")

    translations = payload.get("translations")
    if translations is None or translations == []:
        raise NoTranslationsError()
    if not isinstance(translations, list) or not isinstance(translations[0], dict):
        raise ResponseParseError("'translations' must be a list of objects")

    first = translations[0]
    text = first.get("text")
    if not isinstance(text, str) or not text.strip():
        raise EmptyTranslationTextError()

    detected = first.get("detected_source_language")
    if not isinstance(detected, str) or not detected.strip():
        detected = None
    return RawTranslation(
        text=text.strip(),
        detected_source_language=detected.strip().upper() if detected else None,
    )


class TranslationClient(TranslationProvider):
    """DeepL REST client over a shared httpx.AsyncClient."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        auth_scheme: str = DEFAULT_AUTH_SCHEME,
        timeout_seconds: float = _TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise InvalidArgumentError("api_key", "API key cannot be null or empty")
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"{auth_scheme} {api_key.strip()}"},
            timeout=timeout_seconds,
            transport=transport,
        )
        logger.info(
            "translation_client_initialized",
            base_url=self._base_url,
            timeout_seconds=timeout_seconds,
        )

    async def __aenter__(self) -> TranslationClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the connection pool."""
        logger.info("translation_client_shutdown")
        await self._client.aclose()

    async def _send(
        self, method: str, url: str, cancel: CancelToken | None, **kwargs: Any
    ) -> httpx.Response:
        coro = self._client.request(method, url, **kwargs)
        try:
            if cancel is None:
                return await coro
            return await cancel.run(coro)
        except httpx.DecodingError as e:
            # Body arrived but could not be decoded (e.g. corrupt gzip).
            logger.warning("translation_decode_error", url=url, error=str(e))
            raise ResponseParseError(str(e) or type(e).__name__) from e
        except httpx.RequestError as e:
            logger.warning(
                "translation_network_error",
                url=url,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise NetworkError(str(e) or type(e).__name__) from e

    async def request(
        self,
        text: str,
        target_language_code: str,
        source_language_code: str | None = None,
        cancel: CancelToken | None = None,
    ) -> RawTranslation:
        """Send one translation request and parse the answer."""
        form = {"text": text, "target_lang": target_language_code.upper()}
        if source_language_code:
            form["source_lang"] = source_language_code.upper()

        response = await self._send("POST", "/translate", cancel, data=form)
        body = response.text

        if not response.is_success:
            logger.error(
                "translation_api_error",
                status_code=response.status_code,
                body=body[:500],
            )
            raise _classify_status(response.status_code, body)

        result = parse_translation_body(body)
        logger.debug(
            "translation_api_ok",
            text_len=len(text),
            detected=result.detected_source_language,
        )
        return result

    async def probe(self, cancel: CancelToken | None = None) -> int:
        """GET the target-language list and return its status code."""
        response = await self._send(
            "GET", "/languages", cancel, params={"type": "target"}
        )
        logger.debug("connectivity_check", status_code=response.status_code)
        return response.status_code

    async def get_supported_languages(self) -> list[LanguageInfo]:
        """Fetch live target languages. Any failure returns the default list."""
        try:
            response = await self._send(
                "GET", "/languages", None, params={"type": "target"}
            )
            if response.is_success:
                entries = response.json()
                languages = [
                    LanguageInfo(
                        code=str(entry["language"]).upper(),
                        name=str(entry.get("name") or entry["language"]),
                        flag=catalog.flag_for(str(entry["language"])),
                    )
                    for entry in entries
                ]
                logger.info("supported_languages_loaded", count=len(languages))
                return languages
            logger.warning(
                "supported_languages_http_error", status_code=response.status_code
            )
        except (TranslatorError, ValueError, KeyError, TypeError) as e:
            logger.warning("supported_languages_failed", error=str(e))
        return list(DEFAULT_REMOTE_LANGUAGES)
