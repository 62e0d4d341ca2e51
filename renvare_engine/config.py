"""
Runtime settings read from environment variables (RENVARE_*, plus the
Kassalapp key under its own name) or a local .env file.

The library itself takes everything through constructor arguments; only the
entrypoints (api_server.py, main.py) build a Settings and call
configure_logging.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# classify-batch never accepts more than this many items
BATCH_SIZE_LIMIT = 100


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RENVARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    cache_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    cache_max_entries: int = Field(default=10000, gt=0)
    max_batch_size: int = Field(default=BATCH_SIZE_LIMIT, ge=1, le=BATCH_SIZE_LIMIT)
    log_level: str = "INFO"

    kassalapp_api_key: Optional[str] = Field(default=None, validation_alias="KASSALAPP_API_KEY")

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @field_validator("kassalapp_api_key")
    @classmethod
    def _blank_key_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
