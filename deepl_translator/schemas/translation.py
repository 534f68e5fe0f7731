"""Translation request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TranslateRequest(BaseModel):
    """POST /v1/translate request body."""

    text: str
    target_lang: str
    source_lang: str | None = None
    stream: bool = False


class TranslateResponse(BaseModel):
    """POST /v1/translate response body."""

    model_config = ConfigDict(from_attributes=True)

    translated_text: str
    detected_source_language: str
    detected_source_language_name: str
    detected_source_language_flag: str
    success: bool = True


class StreamEvent(BaseModel):
    """SSE payload: progress events, then one event with done=True."""

    done: bool = False
    message: str | None = None
    percent: int | None = None
    attempt: int | None = None
    translated_text: str | None = None
    detected_source_language: str | None = None
    success: bool | None = None
    error_code: str | None = None
    error_message: str | None = None


class BatchTranslateRequest(BaseModel):
    """POST /v1/translate/batch request body."""

    texts: list[str] = Field(default_factory=list)
    target_lang: str
    source_lang: str | None = None


class BatchItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    original: str
    translated_text: str
    detected_source_language: str
    success: bool
    error_message: str | None = None


class BatchTranslateResponse(BaseModel):
    """POST /v1/translate/batch response body. Same order as the request."""

    results: list[BatchItem]
