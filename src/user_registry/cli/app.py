"""CLI application entry point and command routing for user-registry.

This module is the **sole error boundary** for the entire application.
It catches :class:`~user_registry.exceptions.UserRegistryError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages and returning well-defined exit codes.

Architecture notes
------------------
* Every invocation follows the same sequence: load the data file if it
  exists, run exactly one command, save if the command mutated the
  store, render the result.
* Business rules live in :mod:`user_registry.core`; this module only
  translates between argv, the store, and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from user_registry.cli import exit_codes
from user_registry.cli.console import console, err_console, escape
from user_registry.cli.logging_setup import configure_logging
from user_registry.config import get_settings
from user_registry.core.models import UserPatch
from user_registry.core.store import UserStore
from user_registry.exceptions import NotFoundError, UserRegistryError
from user_registry.infra.json_storage import JsonFileStorage
from user_registry.version import __version__

logger = logging.getLogger(__name__)

MUTATING_COMMANDS: frozenset[str] = frozenset({"add", "remove", "update"})


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _user_id(value: str) -> int:
    """argparse ``type`` for identifiers: a non-negative integer."""
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid id: {value!r}") from None
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"id must not be negative: {value}")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser with one sub-command per verb."""
    parser = argparse.ArgumentParser(
        prog="user-registry",
        description="A CLI tool for managing users.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        default=None,
        help="JSON data file (default: $USER_REGISTRY_FILE or users.json).",
    )
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print results as JSON instead of a table.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr.",
    )

    commands = parser.add_subparsers(dest="command", metavar="<command>")

    add = commands.add_parser("add", help="Add a new user")
    add.add_argument("-n", "--name", required=True)
    add.add_argument("-e", "--email", required=True)
    add.add_argument("-a", "--age", type=int, required=True)

    commands.add_parser("list", help="List all users")

    get = commands.add_parser("get", help="Get a specific user by ID")
    get.add_argument("-i", "--id", dest="user_id", type=_user_id, required=True)

    remove = commands.add_parser("remove", help="Remove a user by ID")
    remove.add_argument("-i", "--id", dest="user_id", type=_user_id, required=True)

    update = commands.add_parser("update", help="Update a user")
    update.add_argument("-i", "--id", dest="user_id", type=_user_id, required=True)
    update.add_argument("--name", default=None)
    update.add_argument("--email", default=None)
    update.add_argument("--age", type=int, default=None)

    search = commands.add_parser("search", help="Search users by name")
    search.add_argument("-q", "--query", required=True)

    commands.add_parser("doctor", help="Check the environment and the data file")

    return parser


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def _handle_add(store: UserStore, args: argparse.Namespace) -> None:
    from user_registry.cli.render import print_json

    user_id = store.add(args.name, args.email, args.age)
    store.save(args.data_file)

    user = store.get(user_id)
    if args.as_json and user is not None:
        print_json(user.to_dict())
    else:
        console.print(f"Added user with ID: {user_id}")


def _handle_list(store: UserStore, args: argparse.Namespace) -> None:
    from user_registry.cli.render import print_json, print_user_table, users_payload

    users = store.list()
    if args.as_json:
        print_json(users_payload(users))
    elif not users:
        console.print("No users found.")
    else:
        print_user_table(users)


def _handle_get(store: UserStore, args: argparse.Namespace) -> None:
    from user_registry.cli.render import print_json, print_user_detail

    user = store.get(args.user_id)
    if user is None:
        raise NotFoundError(args.user_id)
    if args.as_json:
        print_json(user.to_dict())
    else:
        print_user_detail(user)


def _handle_remove(store: UserStore, args: argparse.Namespace) -> None:
    from user_registry.cli.render import print_json

    user = store.remove(args.user_id)
    store.save(args.data_file)

    if args.as_json:
        print_json(user.to_dict())
    else:
        console.print(f"Removed user: {escape(user.name)} ({escape(user.email)})")


def _handle_update(store: UserStore, args: argparse.Namespace) -> None:
    from user_registry.cli.render import print_json

    patch = UserPatch(name=args.name, email=args.email, age=args.age)
    user = store.update(args.user_id, patch)
    store.save(args.data_file)

    if args.as_json:
        print_json(user.to_dict())
    else:
        console.print(f"Updated user with ID: {user.id}")


def _handle_search(store: UserStore, args: argparse.Namespace) -> None:
    from user_registry.cli.render import print_json, print_user_table, users_payload

    users = store.search(args.query)
    if args.as_json:
        print_json(users_payload(users))
    elif not users:
        console.print(f"No users found matching '{escape(args.query)}'.")
    else:
        print_user_table(
            users,
            title=f"Found {len(users)} user(s) matching '{args.query}'",
        )


_HANDLERS: dict[str, Callable[[UserStore, argparse.Namespace], None]] = {
    "add": _handle_add,
    "list": _handle_list,
    "get": _handle_get,
    "remove": _handle_remove,
    "update": _handle_update,
    "search": _handle_search,
}


def _handle_doctor(data_file: Path) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from user_registry.cli.doctor import run_doctor

    return run_doctor(data_file)


# ---------------------------------------------------------------------------
# Store bootstrap
# ---------------------------------------------------------------------------

def open_store(data_file: Path) -> UserStore:
    """Build a JSON-backed store, loading *data_file* when it exists."""
    store = UserStore(JsonFileStorage())
    if data_file.exists():
        store.load(data_file)
    else:
        logger.debug("No data file at %s; starting with an empty registry", data_file)
    return store


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the user-registry CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(logging.DEBUG if args.verbose else settings.log_level)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    data_file: Path = args.file if args.file is not None else settings.data_file
    args.data_file = data_file

    if args.command == "doctor":
        return _handle_doctor(data_file)

    if args.command == "update" and UserPatch(args.name, args.email, args.age).is_empty:
        parser.error("update requires at least one of --name, --email or --age")

    store = open_store(data_file)
    logger.debug("Running %r against %s", args.command, data_file)
    _HANDLERS[args.command](store, args)
    if args.command in MUTATING_COMMANDS:
        logger.info("Saved %d user(s) to %s", len(store), data_file)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except UserRegistryError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(exc)}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(exc)}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
