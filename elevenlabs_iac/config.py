"""Provider settings loaded from environment variables / .env file."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.elevenlabs.io"
DEFAULT_REQUEST_TIMEOUT = 10.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ELEVENLABS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(..., min_length=1)
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = Field(DEFAULT_REQUEST_TIMEOUT, gt=0)
    state_file: Path = Path("elevenlabs.state.json")
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
