"""JSON encoding of the identifier → user mapping.

Wire format::

    {
      "1": {"id": 1, "name": "Ann", "email": "ann@x.com", "age": 25},
      "2": {"id": 2, "name": "Bob", "email": "bob@x.com", "age": 40}
    }

Keys are decimal identifiers; each value repeats its identifier in the
``id`` field.  Output is pretty-printed and ordered by identifier so
that saved files diff cleanly.

Decoding checks the *shape* of the document (types, key/id agreement,
integer ranges) but deliberately does not apply the business rules in
:mod:`user_registry.core.validation`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from user_registry.core.models import User
from user_registry.exceptions import DeserializationError, SerializationError

MAX_ID = 2**32 - 1
MAX_STORED_AGE = 255

_HINT = "Fix or remove the data file, or point --file at another location."


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_users(users: Mapping[int, User]) -> str:
    """Serialize *users* to a pretty-printed JSON document."""
    document = {str(user_id): users[user_id].to_dict() for user_id in sorted(users)}
    try:
        text = json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False) + "\n"
        # Lone surrogates survive json.dumps but cannot be written as UTF-8.
        text.encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot encode users: {exc}") from exc
    return text


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_users(text: str) -> dict[int, User]:
    """Parse a JSON document produced by :func:`encode_users`.

    Raises
    ------
    DeserializationError
        If *text* is not JSON or does not have the expected shape.
    """
    try:
        document: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DeserializationError(
            f"Data file is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            hint=_HINT,
        ) from exc

    if not isinstance(document, dict):
        raise DeserializationError(
            f"Expected a JSON object of users, got {_type_name(document)}.",
            hint=_HINT,
        )

    users: dict[int, User] = {}
    for key, raw in document.items():
        user_id = _parse_key(key)
        users[user_id] = _parse_user(key, user_id, raw)
    return users


def _parse_key(key: str) -> int:
    if not key.isascii() or not key.isdigit():
        raise DeserializationError(
            f"Invalid user key {key!r}: expected a non-negative integer.",
            hint=_HINT,
        )
    if len(key) > len(str(MAX_ID)):
        raise DeserializationError(f"User key {key!r} is out of range.", hint=_HINT)
    user_id = int(key)
    if key != str(user_id):
        raise DeserializationError(
            f"Invalid user key {key!r}: leading zeros are not allowed.",
            hint=_HINT,
        )
    if user_id > MAX_ID:
        raise DeserializationError(f"User key {key!r} is out of range.", hint=_HINT)
    return user_id


def _parse_user(key: str, user_id: int, raw: object) -> User:
    if not isinstance(raw, dict):
        raise DeserializationError(
            f"User {key!r}: expected an object, got {_type_name(raw)}.",
            hint=_HINT,
        )

    record_id = _require_int(key, raw, "id")
    if record_id != user_id:
        raise DeserializationError(
            f"User {key!r}: id field {record_id} does not match its key.",
            hint=_HINT,
        )
    age = _require_int(key, raw, "age")
    if not 0 <= age <= MAX_STORED_AGE:
        raise DeserializationError(
            f"User {key!r}: age {age} is outside 0-{MAX_STORED_AGE}.",
            hint=_HINT,
        )

    return User(
        id=record_id,
        name=_require_str(key, raw, "name"),
        email=_require_str(key, raw, "email"),
        age=age,
    )


def _require_int(key: str, raw: dict[str, Any], field: str) -> int:
    value = raw.get(field)
    # bool is a subclass of int; JSON true/false must not pass as numbers.
    if not isinstance(value, int) or isinstance(value, bool):
        raise DeserializationError(
            f"User {key!r}: field {field!r} must be an integer.",
            hint=_HINT,
        )
    return value


def _require_str(key: str, raw: dict[str, Any], field: str) -> str:
    value = raw.get(field)
    if not isinstance(value, str):
        raise DeserializationError(
            f"User {key!r}: field {field!r} must be a string.",
            hint=_HINT,
        )
    return value


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    return {
        dict: "object",
        list: "array",
        str: "string",
        bool: "boolean",
        int: "number",
        float: "number",
    }.get(type(value), type(value).__name__)
