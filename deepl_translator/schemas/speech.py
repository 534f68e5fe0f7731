"""Speech request/response schemas."""

from pydantic import BaseModel


class SpeakRequest(BaseModel):
    """POST /v1/speak request body."""

    text: str
    language_code: str = "EN-US"


class SpeakResponse(BaseModel):
    """POST /v1/speak response body."""

    spoken: bool = True
    language_code: str
    voice_locale: str
    truncated: bool = False
