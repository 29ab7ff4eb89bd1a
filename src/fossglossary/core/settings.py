"""Centralized glossary configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

Pipeline stages never read `settings` themselves; the command line resolves
paths and flags here and passes them down explicitly.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# 2 MB ceiling on the published artifact.
DEFAULT_MAX_EXPORT_BYTES = 2 * 1024 * 1024


class Settings(BaseSettings):
    """Typed glossary configuration loaded from env and `.env` files.

    Attributes
    ----------
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    terms_path : Path
        Source YAML document; maps from `FOSSGLOSSARY_TERMS_PATH`.
    export_path : Path
        Destination of the JSON artifact; maps from `FOSSGLOSSARY_EXPORT_PATH`.
    base_terms_path : Optional[Path]
        Previously published source used for slug stability checks; maps
        from `BASE_TERMS_PATH`.
    max_export_bytes : int
        Byte ceiling of the serialized artifact; maps from
        `FOSSGLOSSARY_MAX_EXPORT_BYTES`.
    """

    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    terms_path: Path = Field(default=Path("terms.yaml"), alias="FOSSGLOSSARY_TERMS_PATH")
    export_path: Path = Field(default=Path("docs/terms.json"), alias="FOSSGLOSSARY_EXPORT_PATH")
    base_terms_path: Path | None = Field(default=None, alias="BASE_TERMS_PATH")
    max_export_bytes: int = Field(
        default=DEFAULT_MAX_EXPORT_BYTES, gt=0, alias="FOSSGLOSSARY_MAX_EXPORT_BYTES"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    return Settings()


settings: Settings = load_settings()


def get_logger(name: str = "fossglossary") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
