"""Runtime settings read from the environment.

The CLI layer calls :func:`get_settings` once per invocation; explicit
command-line flags take precedence over anything resolved here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_DATA_FILE = "users.json"

FILE_ENV_VAR = "USER_REGISTRY_FILE"
LOG_LEVEL_ENV_VAR = "USER_REGISTRY_LOG_LEVEL"


@dataclass(frozen=True, slots=True)
class Settings:
    """Typed view of the environment variables user-registry honours."""

    data_file: Path
    """Default location of the JSON data file."""

    log_level: int
    """Root logging level used when ``--verbose`` is not given."""


def _log_level(value: str | None, default: int = logging.WARNING) -> int:
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a :class:`Settings` instance."""
    return Settings(
        data_file=Path(os.getenv(FILE_ENV_VAR) or DEFAULT_DATA_FILE),
        log_level=_log_level(os.getenv(LOG_LEVEL_ENV_VAR)),
    )
