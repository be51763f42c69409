"""Configuration utilities for MEVGuard."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Environment-backed settings (``MEVGUARD_*`` variables or ``.env``)."""

    model_config = SettingsConfigDict(
        env_prefix="MEVGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    analyze_url: Optional[str] = Field(
        default="http://127.0.0.1:8000/api/analyze",
        description="Primary analysis endpoint; empty disables the HTTP channel",
    )
    primary_timeout: float = Field(default=10.0, gt=0, description="Seconds before the HTTP channel gives up")
    log_level: str = Field(default="INFO")
    seed_ledger: bool = Field(default=True, description="Start sessions with the sample incidents")

    @field_validator("analyze_url", mode="before")
    @classmethod
    def _optional_url(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            return value or None
        raise ValueError("analyze_url must be a string")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        raise ValueError("log_level must be a string")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["Settings", "configure_logging", "get_settings"]
