"""Infrastructure layer: external system integration.

This layer wraps all interaction with the filesystem and the JSON
encoder.  Every raw ``OSError`` or ``json`` exception is caught here and
re-raised as a :class:`~user_registry.exceptions.UserRegistryError`
subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from user_registry.infra.json_codec import decode_users, encode_users
from user_registry.infra.json_storage import JsonFileStorage

__all__: list[str] = [
    "JsonFileStorage",
    "decode_users",
    "encode_users",
]
