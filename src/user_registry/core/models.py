"""Domain models for user-registry.

All models are **frozen** dataclasses, immutable value objects.  They
carry zero I/O and zero dependencies on external packages.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


# ---------------------------------------------------------------------------
# User record
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class User:
    """A single registered user."""

    id: int
    """Identifier assigned by the store; never supplied by clients."""

    name: str
    """Display name."""

    email: str
    """Contact address.  Only checked for an ``@`` character."""

    age: int
    """Age in years."""

    def to_dict(self) -> dict[str, object]:
        """Return the record as a plain dict in persisted field order."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
        }


# ---------------------------------------------------------------------------
# Partial update
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class UserPatch:
    """Set of optional field changes for :meth:`UserStore.update`.

    A field left as ``None`` is not touched.  Applying a patch never
    mutates the original record; it builds a new candidate instead.
    """

    name: str | None = None
    email: str | None = None
    age: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.email is None and self.age is None

    def apply(self, user: User) -> User:
        """Return a copy of *user* with every supplied field replaced."""
        changes: dict[str, object] = {}
        if self.name is not None:
            changes["name"] = self.name
        if self.email is not None:
            changes["email"] = self.email
        if self.age is not None:
            changes["age"] = self.age
        return replace(user, **changes)
