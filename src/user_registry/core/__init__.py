"""Core / service layer: pure business logic.

Rules
-----
* No ``print()`` calls and no logging.
* No filesystem access except through an injected ``UserStorage``.
* No imports from ``cli`` or ``infra``.
"""

from user_registry.core.models import User, UserPatch
from user_registry.core.protocols import UserStorage
from user_registry.core.store import UserStore
from user_registry.core.validation import MAX_AGE, validate_user

__all__: list[str] = [
    "MAX_AGE",
    "User",
    "UserPatch",
    "UserStorage",
    "UserStore",
    "validate_user",
]
