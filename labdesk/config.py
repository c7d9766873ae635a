"""
Configuration settings for labdesk.

Uses Pydantic Settings to load environment variables for logging, view defaults,
the JSON-file record store used by the CLI, and approval workflow options.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Views
    page_size: int = Field(5, alias="PAGE_SIZE", ge=1)

    # Collaborators
    data_file: Path = Field(Path("data/records.json"), alias="DATA_FILE")
    export_dir: Path = Field(Path("exports"), alias="EXPORT_DIR")

    # Approval workflow
    approval_version_check: bool = Field(False, alias="APPROVAL_VERSION_CHECK")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
