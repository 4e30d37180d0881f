"""CLI console helpers with optional Rich support.

This module avoids module-level imports of Rich so that bootstrap paths
(``--help``, ``--version``) and plain output keep working when Rich is
not installed.

Two proxies are exposed: :data:`console` writes command results to
stdout, :data:`err_console` writes errors and diagnostics to stderr.
"""

from __future__ import annotations

import sys
from typing import Any

from user_registry.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = False) -> Any:
	"""Create a Rich console instance targeting stdout or stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr, highlight=False)


def escape(text: object) -> str:
	"""Escape Rich markup in *text*; returned unchanged when Rich is absent."""
	try:
		from rich.markup import escape as rich_escape
	except ModuleNotFoundError:
		return str(text)
	return rich_escape(str(text))


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain ``print``."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except EnvironmentError:
			stream = sys.stderr if self._stderr else sys.stdout
			print(*objects, file=stream)
			return
		rich_console.print(*objects)


console = _ConsoleProxy(stderr=False)
err_console = _ConsoleProxy(stderr=True)
