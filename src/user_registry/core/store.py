"""Core record store: identifier allocation, CRUD, and persistence.

The store owns the mapping from identifier to
:class:`~user_registry.core.models.User` and the next-identifier counter.
Persistence is delegated to a
:class:`~user_registry.core.protocols.UserStorage` injected at
construction time, keeping the core free of any file or JSON handling.

Guarantees
----------
* No ``print()``, no logging, no prompts.
* Files are touched only by :meth:`UserStore.save` and
  :meth:`UserStore.load`.
* Only :class:`~user_registry.exceptions.UserRegistryError` subclasses
  escape.
* A failed ``add`` or ``update`` leaves the store exactly as it was.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from user_registry.core.models import User, UserPatch
from user_registry.core.protocols import UserStorage
from user_registry.core.validation import validate_user
from user_registry.exceptions import IoError, NotFoundError, UserRegistryError


class UserStore:
    """In-memory user registry with explicit save/load.

    Parameters
    ----------
    storage:
        Any object satisfying the :class:`UserStorage` protocol.
    """

    def __init__(self, storage: UserStorage) -> None:
        self._storage: UserStorage = storage
        self._users: dict[int, User] = {}
        self._next_id: int = 1

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def next_id(self) -> int:
        """Identifier the next successful :meth:`add` will assign."""
        return self._next_id

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __iter__(self) -> Iterator[User]:
        return iter(list(self._users.values()))

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def add(self, name: str, email: str, age: int) -> int:
        """Validate and insert a new user, returning its identifier.

        Raises
        ------
        ValidationError
            If the candidate record breaks a business rule.  No
            identifier is consumed in that case.
        """
        user = User(id=self._next_id, name=name, email=email, age=age)
        validate_user(user)

        self._users[user.id] = user
        self._next_id += 1
        return user.id

    def get(self, user_id: int) -> User | None:
        """Return the user stored under *user_id*, or ``None``."""
        return self._users.get(user_id)

    def list(self) -> list[User]:
        """Return every stored user.  Order is unspecified."""
        return list(self._users.values())

    def remove(self, user_id: int) -> User:
        """Delete and return the user stored under *user_id*.

        The next-identifier counter is left untouched.

        Raises
        ------
        NotFoundError
            If no user is stored under *user_id*.
        """
        try:
            return self._users.pop(user_id)
        except KeyError:
            raise NotFoundError(user_id) from None

    def update(self, user_id: int, patch: UserPatch) -> User:
        """Apply *patch* to the user stored under *user_id*.

        The whole resulting record is validated on a working copy before
        it replaces the stored one.  An empty patch still re-validates
        the unchanged record.

        Raises
        ------
        NotFoundError
            If no user is stored under *user_id*.
        ValidationError
            If the patched record breaks a business rule.  The stored
            record is left unmodified.
        """
        current = self._users.get(user_id)
        if current is None:
            raise NotFoundError(user_id)

        candidate = patch.apply(current)
        validate_user(candidate)

        self._users[user_id] = candidate
        return candidate

    def search(self, query: str) -> list[User]:
        """Return users whose name contains *query*, ignoring case.

        An empty query matches every user.
        """
        needle = query.lower()
        return [user for user in self._users.values() if needle in user.name.lower()]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: str | os.PathLike[str]) -> None:
        """Persist every stored user to *path*.

        Raises
        ------
        IoError
            When the file cannot be written.
        SerializationError
            When the records cannot be encoded.
        """
        target = Path(path)
        try:
            self._storage.write(target, dict(self._users))
        except UserRegistryError:
            raise
        except Exception as exc:
            raise IoError(f"Unexpected storage error while saving {target}: {exc}") from exc

    def load(self, path: str | os.PathLike[str]) -> None:
        """Replace the in-memory state with the content of *path*.

        Records are trusted as persisted and are not re-validated.  The
        next-identifier counter becomes one past the highest loaded
        identifier, or 1 when the file holds no users.  On failure the
        current state is kept.

        Raises
        ------
        IoError
            When the file cannot be read.
        DeserializationError
            When the content is not a valid encoded user mapping.
        """
        source = Path(path)
        try:
            users = self._storage.read(source)
        except UserRegistryError:
            raise
        except Exception as exc:
            raise IoError(f"Unexpected storage error while loading {source}: {exc}") from exc

        self._users = dict(users)
        self._next_id = max(self._users, default=0) + 1
