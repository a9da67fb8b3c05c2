"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Chatsync API"
    api_base_url: str = "http://localhost:3001/api"
    api_token: str | None = None
    request_timeout_seconds: int = 60
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    temp_id_prefix: str = "temp-"

    model_config = SettingsConfigDict(
        env_prefix="CHATSYNC_",
        env_file=str(_BACKEND_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
