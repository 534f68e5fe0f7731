"""Application configuration via pydantic-settings.

Values are loaded from the .env file at the project root, then OS
environment variables, then the defaults below. The .env file takes
precedence so a stale system variable never shadows the project config.

DEEPL_API_KEY falls back to a documented placeholder so the app can start
without credentials; every request will then fail with an auth error.
Production deployments MUST override it.
"""

from pathlib import Path
from typing import Tuple, Type

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# Project root is two levels up: deepl_translator/core/config.py → project root
_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_API_KEY = "00000000-0000-0000-0000-000000000000:fx"


def is_valid_api_key(api_key: str) -> bool:
    """Shape check for a DeepL key: non-blank, has a ':' suffix, long enough."""
    return bool(api_key and api_key.strip()) and ":" in api_key and len(api_key) > 10


class Settings(BaseSettings):
    """Central application settings. .env file wins over OS env vars."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Override source priority: .env file > OS env vars > defaults."""
        return (init_settings, dotenv_settings, env_settings, file_secret_settings)

    # --- DeepL ---
    deepl_api_key: str = DEFAULT_API_KEY
    deepl_base_url: str = "https://api-free.deepl.com/v2"
    deepl_auth_scheme: str = "DeepL-Auth-Key"

    # --- Requests ---
    request_timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    max_text_length: int = 5000

    # --- App ---
    app_name: str = "DeepL Translator"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    log_file: str = str(Path.home() / ".deepl-translator" / "error_log.txt")

    @property
    def has_valid_api_key(self) -> bool:
        return is_valid_api_key(self.deepl_api_key)

    @property
    def uses_default_api_key(self) -> bool:
        return self.deepl_api_key == DEFAULT_API_KEY


settings = Settings()
