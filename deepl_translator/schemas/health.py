"""Health check schema."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """GET /v1/health response body."""

    app: str
    version: str
    api_key_valid: bool
    using_default_api_key: bool
    upstream_reachable: bool
    upstream_status: int | None = None
