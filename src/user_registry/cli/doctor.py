"""``user-registry doctor``: environment and data-file diagnostics.

Gathers runtime information and renders a table summarising whether the
environment and the configured data file are usable.

This module lives in the CLI layer. It may import from ``infra`` and
``core``, and it renders via Rich.  It only collects and displays
diagnostic data; it never writes the data file.
"""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from user_registry.cli import exit_codes
from user_registry.cli.console import err_console
from user_registry.core.store import UserStore
from user_registry.exceptions import UserRegistryError
from user_registry.infra.json_storage import JsonFileStorage
from user_registry.version import __version__

_OK = "[green]OK[/green]"
_WARN = "[yellow]WARN[/yellow]"
_FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _registry_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the user-registry version row."""
    return "user-registry", __version__, _OK


def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    py_version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = _OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", py_version, status


def _rich_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Rich row.  Rich is optional."""
    try:
        import rich  # noqa: F401
    except ModuleNotFoundError:
        return "rich", "not installed", _WARN
    try:
        return "rich", version("rich"), _OK
    except PackageNotFoundError:
        return "rich", "unknown", _OK


def _data_file_check(data_file: Path) -> tuple[str, str, str]:
    """Return (label, value, status) for the data file row."""
    if not data_file.exists():
        return "Data file", f"{data_file} (not created yet)", _OK

    store = UserStore(JsonFileStorage())
    try:
        store.load(data_file)
    except UserRegistryError as exc:
        return "Data file", f"{data_file}: {exc}", _FAIL

    return (
        "Data file",
        f"{data_file} ({len(store)} user(s), next id {store.next_id})",
        _OK,
    )


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nuser-registry doctor", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"{'Component':<14} {'Value':<36} {'Status':<8}", file=sys.stderr)
    print("-" * 60, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<14} {value:<36} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(data_file: Path) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _registry_version_check(),
        _python_version_check(),
        _rich_check(),
        _data_file_check(data_file),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
        from rich.text import Text
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
        print("Some checks failed." if has_failure else "All checks passed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS

    table = Table(
        title="user-registry doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, Text(value), status)

    err_console.print()
    err_console.print(table)
    err_console.print()

    if has_failure:
        err_console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    err_console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
