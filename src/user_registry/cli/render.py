"""Presentation of user records for the CLI layer.

Records are always presented sorted by identifier.  Tabular output uses
a Rich table when Rich is installed and fixed-width plain text when it
is not; ``--json`` output is plain JSON on stdout either way.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from user_registry.cli.console import console
from user_registry.core.models import User
from user_registry.exceptions import EnvironmentError

_PLAIN_ROW = "{:<4} {:<20} {:<30} {:<4}"


def _import_rich_renderables() -> tuple[type[Any], type[Any]]:
    """Import Rich ``Table`` and ``Text`` lazily."""
    try:
        from rich.table import Table
        from rich.text import Text
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table, Text


def sort_users(users: Iterable[User]) -> list[User]:
    """Return *users* ordered by ascending identifier."""
    return sorted(users, key=lambda user: user.id)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def print_json(payload: object) -> None:
    """Write *payload* to stdout as indented JSON."""
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def users_payload(users: Iterable[User]) -> list[dict[str, object]]:
    return [user.to_dict() for user in sort_users(users)]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def _print_plain_table(users: list[User]) -> None:
    print(_PLAIN_ROW.format("ID", "Name", "Email", "Age"))
    print("-" * 60)
    for user in users:
        print(_PLAIN_ROW.format(user.id, user.name, user.email, user.age))


def print_user_table(users: Iterable[User], *, title: str | None = None) -> None:
    """Render *users* as a table sorted by identifier."""
    ordered = sort_users(users)
    try:
        table_class, text_class = _import_rich_renderables()
    except EnvironmentError:
        if title:
            print(title)
        _print_plain_table(ordered)
        return

    table = table_class(
        title=text_class(title) if title else None,
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", min_width=12)
    table.add_column("Email", min_width=16)
    table.add_column("Age", justify="right")

    for user in ordered:
        # Text() keeps user-supplied brackets from being read as markup.
        table.add_row(
            str(user.id),
            text_class(user.name),
            text_class(user.email),
            str(user.age),
        )

    console.print(table)


def print_user_detail(user: User) -> None:
    """Render a single record as ``Field: value`` lines."""
    print("User found:")
    print(f"ID: {user.id}")
    print(f"Name: {user.name}")
    print(f"Email: {user.email}")
    print(f"Age: {user.age}")
