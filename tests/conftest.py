"""Shared test fixtures for Tenet."""

from __future__ import annotations

import pytest

from tenet.config import Settings, reset_settings
from tenet.mapping import MetadataFactory
from tenet.validator import Validator


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Isolate tests from TENET_* variables and cached settings."""
    for name in ("TENET_ROOT_PATH", "TENET_MAX_DEPTH", "TENET_VERBOSITY", "TENET_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def factory():
    return MetadataFactory()


@pytest.fixture
def validator(factory, settings):
    return Validator(metadata_factory=factory, settings=settings)
