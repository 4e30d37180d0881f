"""Custom exception hierarchy for user-registry.

All exceptions that cross layer boundaries must inherit from
:class:`UserRegistryError`.  Raw ``OSError`` and ``json`` exceptions must
NEVER propagate beyond the infrastructure layer; they are caught there
and re-raised as a typed subclass defined here.

Hierarchy
---------
UserRegistryError
├── ValidationError
├── NotFoundError
├── StorageError
│   ├── IoError
│   ├── SerializationError
│   └── DeserializationError
└── EnvironmentError
"""

from __future__ import annotations


class UserRegistryError(Exception):
    """Base exception for all user-registry errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Record rules ----------------------------------------------------------

class ValidationError(UserRegistryError):
    """Raised when a candidate record fails the business rules."""


class NotFoundError(UserRegistryError):
    """Raised when an operation targets an identifier that is not stored."""

    def __init__(
        self,
        user_id: int,
        *,
        hint: str | None = None,
    ) -> None:
        super().__init__(f"User with id {user_id} not found", hint=hint)
        self.user_id: int = user_id


# --- Persistence -----------------------------------------------------------

class StorageError(UserRegistryError):
    """Base class for persistence failures."""


class IoError(StorageError):
    """Raised when the data file cannot be read or written."""


class SerializationError(StorageError):
    """Raised when the in-memory records cannot be encoded."""


class DeserializationError(StorageError):
    """Raised when file content is not a valid encoded user mapping."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(UserRegistryError):
    """Raised when an optional runtime dependency is not available."""
