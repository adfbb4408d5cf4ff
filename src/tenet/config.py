"""Configuration settings for Tenet.

Settings are read from ``TENET_*`` environment variables or a ``.env`` file.
"""

from __future__ import annotations

from functools import cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TENET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Property path given to root nodes
    root_path: str = ""

    # Nodes deeper than this abort the run. Nested rules such as All inside
    # All recurse, so this stays well below the interpreter recursion limit
    max_depth: int = Field(default=100, ge=1)

    # Console verbosity for the CLI (0 = summary, 1 = verbose, 2 = debug)
    verbosity: int = Field(default=0, ge=0, le=2)

    # JSONL run logs are appended here when set
    log_dir: Path | None = None


@cache
def get_settings() -> Settings:
    """Settings read from the environment on first use."""
    return Settings()


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
