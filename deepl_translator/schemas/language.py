"""Language list schemas."""

from pydantic import BaseModel, ConfigDict


class LanguageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    flag: str


class LanguagesResponse(BaseModel):
    """GET /v1/languages response body."""

    source: str
    languages: list[LanguageOut]
