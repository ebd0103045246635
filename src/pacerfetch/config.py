from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment/.env."""

    api_base_url: str = Field(default="https://courtapi.inforuptcy.com")
    api_key: str | None = Field(default=None)
    api_secret: str | None = Field(default=None)
    user_agent: str = Field(default="pacerfetch/0.1")
    api_timeout: float = Field(default=60.0)
    page_size: int = Field(default=500, ge=1)
    sort_order: str = Field(default="desc", pattern="^(asc|desc)$")
    download_dir: Path = Field(default=Path("."))
    update_empty_parts: bool = Field(default=True)
    continue_on_error: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="COURTAPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
