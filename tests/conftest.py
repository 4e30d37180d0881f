"""Shared pytest fixtures and configuration for the user-registry test suite.

Guidelines
----------
* Files are only ever written below ``tmp_path``.
* Core tests use a mocked ``UserStorage`` unless they exercise save/load.
* Tests must not depend on the caller's environment variables.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from user_registry.config import FILE_ENV_VAR, LOG_LEVEL_ENV_VAR, get_settings
from user_registry.core.store import UserStore
from user_registry.infra.json_storage import JsonFileStorage


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop registry env vars and the cached settings around every test."""
    monkeypatch.delenv(FILE_ENV_VAR, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """Location of a (not yet created) data file."""
    return tmp_path / "users.json"


@pytest.fixture
def store() -> UserStore:
    """Empty store backed by real JSON file storage."""
    return UserStore(JsonFileStorage())
