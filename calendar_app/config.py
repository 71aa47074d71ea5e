"""Application settings, read from ``CALENDAR_*`` environment variables or ``.env``."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Calendar Service"
    # Unset keeps the catalog in memory only.
    storage_path: Path | None = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
