"""JSON file backed implementation of :class:`~user_registry.core.protocols.UserStorage`.

This module is the **only** place in the codebase that touches the data
file.  Every ``OSError`` is caught here and re-raised as
:class:`~user_registry.exceptions.IoError`, so nothing raw escapes the
infrastructure boundary.

Writes are atomic: content goes to a temporary file in the target
directory which then replaces the data file via :func:`os.replace`.
The replaced file keeps the permission bits of the one it replaces.
There is no locking; concurrent writers race and the last save wins.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Mapping
from pathlib import Path

from user_registry.core.models import User
from user_registry.exceptions import DeserializationError, IoError
from user_registry.infra.json_codec import decode_users, encode_users

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """Concrete :class:`UserStorage` writing one pretty-printed JSON file.

    Usage::

        storage = JsonFileStorage()
        store = UserStore(storage)
        store.load("users.json")

    This class satisfies the :class:`~user_registry.core.protocols.UserStorage`
    protocol structurally; no explicit inheritance required.
    """

    encoding: str = "utf-8"

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def read(self, path: Path) -> dict[int, User]:
        """Read and decode the users stored at *path*.

        Raises
        ------
        IoError
            When the file cannot be opened or read.
        DeserializationError
            When the file is not valid UTF-8 or not a valid user mapping.
        """
        logger.debug("Reading users from %s", path)
        try:
            text = path.read_text(encoding=self.encoding)
        except UnicodeDecodeError as exc:
            raise DeserializationError(
                f"Data file {path} is not valid UTF-8 text.",
            ) from exc
        except OSError as exc:
            raise IoError(
                f"Cannot read {path}: {exc.strerror or exc}",
                hint="Check that the file exists and is readable.",
            ) from exc

        users = decode_users(text)
        logger.debug("Loaded %d user(s) from %s", len(users), path)
        return users

    def write(self, path: Path, users: Mapping[int, User]) -> None:
        """Encode *users* and atomically replace *path* with the result.

        Raises
        ------
        IoError
            When the temporary file cannot be created, written, or moved
            into place.  The previous content of *path* is left intact.
        SerializationError
            When the mapping cannot be encoded.
        """
        text = encode_users(users)

        logger.debug("Writing %d user(s) to %s", len(users), path)
        tmp_name: str | None = None
        try:
            mode = self._target_mode(path)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.",
                suffix=".tmp",
                dir=path.parent,
            )
            with os.fdopen(fd, "w", encoding=self.encoding) as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise IoError(
                f"Cannot write {path}: {exc.strerror or exc}",
                hint="Check that the directory exists and is writable.",
            ) from exc
        finally:
            if tmp_name is not None:
                self._discard(Path(tmp_name))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _target_mode(path: Path) -> int:
        """Permission bits the written file should carry.

        An existing data file keeps its mode; a new one gets the usual
        ``0o666`` filtered by the process umask instead of the private
        ``0o600`` that :func:`tempfile.mkstemp` uses.
        """
        try:
            return stat.S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        """Remove a leftover temporary file, logging instead of raising."""
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove temporary file %s: %s", tmp_path, exc)
