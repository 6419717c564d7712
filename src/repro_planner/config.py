"""Application settings, read from ``REPRO_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "repro-planner"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Settings store + override log
    api_base_url: str = "http://localhost:6001"
    api_timeout: float = Field(default=10.0, gt=0)
    settings_namespace: str = "date-validation"

    # Pending-override queue lives under data_dir
    data_dir: Path = Path("data")

    projection_horizon_months: int = Field(default=12, ge=0)
    projection_max_count: int = Field(default=8, ge=0)

    audit_max_attempts: int = Field(default=5, ge=1)
    audit_max_pending: int = Field(default=500, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
