"""Generator configuration using pydantic-settings."""

import logging
from datetime import datetime

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dialects import DIALECTS


class Settings(BaseSettings):
    """Query generator settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUERYGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Benchmark interval
    start: datetime = datetime.fromisoformat("2016-01-01T00:00:00+00:00")
    end: datetime = datetime.fromisoformat("2016-01-02T06:00:00+00:00")

    # Run settings
    # Large enough for every scenario in the devops catalog
    scale: int = 32
    count: int = 1000
    workers: int = 1
    seed: int | None = None
    dialect: str = "ioql"

    # Logging
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("dialect")
    @classmethod
    def _check_dialect(cls, value: str) -> str:
        name = value.lower()
        if name not in DIALECTS:
            raise ValueError(f"Unknown dialect: {value}")
        return name


settings = Settings()
