"""Business rules a :class:`~user_registry.core.models.User` must satisfy.

Checks run in a fixed order (name, email, age) and the first failure
wins; violations are never aggregated.
"""

from __future__ import annotations

from user_registry.core.models import User
from user_registry.exceptions import ValidationError

MAX_AGE = 120


def validate_user(user: User) -> None:
    """Raise :class:`ValidationError` if *user* breaks a business rule."""
    if not user.name:
        raise ValidationError("Name cannot be empty")
    if "@" not in user.email:
        raise ValidationError(
            "Invalid email format",
            hint="An email address must contain an '@' character.",
        )
    if user.age < 0:
        raise ValidationError("Age cannot be negative")
    if user.age > MAX_AGE:
        raise ValidationError(
            "Age must be realistic",
            hint=f"Age must be between 0 and {MAX_AGE}.",
        )
