"""Centralized configuration management for the marketplace data layer."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so that every consumer of :mod:`marketplace.settings` sees
# the same values.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PREFERENCES_BACKEND = "file"
DEFAULT_PREFERENCES_STORAGE_DIR = "./data/preferences"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_FETCH_DELAY_SECONDS = 0.8
DEFAULT_CATALOG_SIZE = 24
DEFAULT_CATALOG_SEED = 42
DEFAULT_PAGE_SIZE = 12
DEFAULT_RECENTLY_VIEWED_LIMIT = 20

PreferencesBackend = Literal["memory", "file", "redis"]


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Every knob has a sensible default so the catalog and preference stores
    work without an ``.env`` file. The durable backend selection decides
    where the preference blob lives between runs.
    """

    _explicit_preferences_backend: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_preferences_backend = (
            "preferences_backend" in normalized_keys
            or "preferences_backend" in self.model_fields_set
        )

    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    preferences_backend: PreferencesBackend = Field(
        default=DEFAULT_PREFERENCES_BACKEND,
        alias="PREFERENCES_BACKEND",
        description=(
            "Durable store used for the preference blob: 'memory' keeps it in"
            " process, 'file' writes JSON files, 'redis' uses REDIS_URL."
        ),
    )
    preferences_storage_dir: Path = Field(
        default=Path(DEFAULT_PREFERENCES_STORAGE_DIR),
        alias="PREFERENCES_STORAGE_DIR",
        description="Directory holding one JSON blob per durable key.",
    )
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string used by the redis durable backend.",
    )
    catalog_fetch_delay_seconds: float = Field(
        default=DEFAULT_FETCH_DELAY_SECONDS,
        ge=0.0,
        alias="CATALOG_FETCH_DELAY_SECONDS",
        description="Simulated network latency applied by the mock product source.",
    )
    catalog_size: int = Field(
        default=DEFAULT_CATALOG_SIZE,
        ge=0,
        alias="CATALOG_SIZE",
        description="Number of mock products generated per load.",
    )
    catalog_seed: int | None = Field(
        default=DEFAULT_CATALOG_SEED,
        alias="CATALOG_SEED",
        description="Random seed for the mock catalog; unset for a fresh catalog per run.",
    )
    catalog_page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        alias="CATALOG_PAGE_SIZE",
        description="Items per page used by the browse listing.",
    )
    recently_viewed_limit: int = Field(
        default=DEFAULT_RECENTLY_VIEWED_LIMIT,
        ge=1,
        alias="RECENTLY_VIEWED_LIMIT",
        description="Capacity of the recently-viewed history.",
    )

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_preferences_backend:
            warnings.append(
                "PREFERENCES_BACKEND is not set - preferences are written as JSON "
                f"files under {self.preferences_storage_dir}"
            )

        if self.preferences_backend == "memory":
            warnings.append(
                "PREFERENCES_BACKEND is 'memory' - favorites and history are lost "
                "when the process exits"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


# Module-level singleton; the getter remains available for tests that prefer
# dependency injection.
settings = get_settings()

__all__ = [
    "AppSettings",
    "DEFAULT_CATALOG_SEED",
    "DEFAULT_CATALOG_SIZE",
    "DEFAULT_FETCH_DELAY_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PREFERENCES_BACKEND",
    "DEFAULT_PREFERENCES_STORAGE_DIR",
    "DEFAULT_RECENTLY_VIEWED_LIMIT",
    "DEFAULT_REDIS_URL",
    "PreferencesBackend",
    "get_settings",
    "settings",
]
