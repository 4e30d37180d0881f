"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from user_registry.core.models import User


class UserStorage(Protocol):
    """Contract for persistence backends of the record store.

    Any object that implements :meth:`read` and :meth:`write` with the
    correct signatures satisfies this protocol structurally.
    """

    def read(self, path: Path) -> dict[int, User]:
        """Read and decode the full identifier → record mapping at *path*.

        Raises
        ------
        IoError
            When the file cannot be read.
        DeserializationError
            When the content is not a valid encoded mapping.
        """
        ...  # pragma: no cover

    def write(self, path: Path, users: Mapping[int, User]) -> None:
        """Encode *users* and write them to *path*, replacing its content.

        Raises
        ------
        IoError
            When the file cannot be written.
        SerializationError
            When the mapping cannot be encoded.
        """
        ...  # pragma: no cover
