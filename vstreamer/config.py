"""
Runtime configuration helpers for the V-Streamer API.

Loads DATABASE_URL and the remaining variables from the .env file located in
the project root, without overriding values supplied by the platform.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required; must come from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="V-Streamer API", alias="APP_NAME")
    api_version: str = Field(default="1.0.0", alias="API_VERSION")
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    # Ten days, matching the lifetime of tokens issued by the first release.
    jwt_expires_minutes: int = Field(default=14400, alias="JWT_EXPIRES_MINUTES")

    max_video_mb: int = Field(default=500, alias="MAX_VIDEO_MB")
    allowed_video_prefix: str = Field(default="video/", alias="ALLOWED_VIDEO_PREFIX")
    allowed_image_prefix: str = Field(default="image/", alias="ALLOWED_IMAGE_PREFIX")

    reconcile_interval_hours: float = Field(default=24.0, alias="RECONCILE_INTERVAL_HOURS")
    disable_reconciliation: bool = Field(default=False, alias="DISABLE_RECONCILIATION")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def max_video_bytes(self) -> int:
        return self.max_video_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
