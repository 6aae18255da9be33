"""Runtime settings for the Stellar Arena tools."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Simulation defaults, overridable via ``STELLAR_ARENA_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="STELLAR_ARENA_", env_file=".env", env_file_encoding="utf-8"
    )

    iterations: int = Field(default=5, description="Battles per simulated scenario", gt=0)
    max_rounds: int = Field(default=50, description="Round cap for simulated battles", gt=0)
    log_level: str = Field(default="INFO", description="Logging level for the entrypoint")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
