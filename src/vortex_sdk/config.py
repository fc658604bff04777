"""Client configuration via environment variables."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.vortexsoftware.com/api/v1"


class VortexSettings(BaseSettings):
    # Platform API
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0

    # Webhooks
    webhook_secret: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VORTEX_",
        extra="ignore",
    )
