"""
Runtime settings read from the environment (and a local .env file).
"""
from __future__ import annotations

import sys

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_path: str = Field("inventory.db", alias="LOCKSMITH_DB_PATH")
    low_stock_threshold: int = Field(3, alias="LOCKSMITH_LOW_STOCK_THRESHOLD")
    log_level: str = Field("INFO", alias="LOCKSMITH_LOG_LEVEL")

    # Folder runner pool size; values below 1 run sequentially
    max_workers: int = Field(1, alias="LOCKSMITH_MAX_WORKERS")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @field_validator("max_workers")
    @classmethod
    def _at_least_one_worker(cls, v: int) -> int:
        return max(1, v)


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Send loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
