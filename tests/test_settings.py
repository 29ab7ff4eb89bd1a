"""Typed smoke tests for the settings loader.

These tests verify three guarantees:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) `get_logger()` respects the configured LOG_LEVEL when constructing loggers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from fossglossary.core.settings import (
    DEFAULT_MAX_EXPORT_BYTES,
    Settings,
    get_logger,
    load_settings,
    settings,
)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Rebuild the cached settings around each test."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_defaults(monkeypatch: Any) -> None:
    for name in (
        "FOSSGLOSSARY_TERMS_PATH",
        "FOSSGLOSSARY_EXPORT_PATH",
        "BASE_TERMS_PATH",
        "FOSSGLOSSARY_MAX_EXPORT_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.terms_path == Path("terms.yaml")
    assert s.export_path == Path("docs/terms.json")
    assert s.base_terms_path is None
    assert s.max_export_bytes == DEFAULT_MAX_EXPORT_BYTES == 2_097_152


def test_env_overrides_with_cache_clear(monkeypatch: Any) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FOSSGLOSSARY_TERMS_PATH", "data/terms.yaml")
    monkeypatch.setenv("BASE_TERMS_PATH", "base.yaml")
    monkeypatch.setenv("FOSSGLOSSARY_MAX_EXPORT_BYTES", "1024")

    s = load_settings()

    assert s.log_level == "DEBUG"
    assert s.terms_path == Path("data/terms.yaml")
    assert s.base_terms_path == Path("base.yaml")
    assert s.max_export_bytes == 1024


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    logger = get_logger("fossglossary.tests.settings")

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one StreamHandler to be attached."


def test_settings_carry_only_pipeline_configuration(monkeypatch: Any) -> None:
    """Unrelated variables (e.g. a stale `FOSSGLOSSARY_ENV`) are ignored."""
    monkeypatch.setenv("FOSSGLOSSARY_ENV", "not-an-environment")

    s = load_settings()

    assert set(Settings.model_fields) == {
        "log_level",
        "terms_path",
        "export_path",
        "base_terms_path",
        "max_export_bytes",
    }
    assert not hasattr(s, "environment")
