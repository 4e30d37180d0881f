"""Root logger configuration for the CLI process.

Only the CLI layer configures logging; library modules just create
``logging.getLogger(__name__)`` loggers.  Log records go to stderr so
they never mix with command output on stdout.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(name)s: %(message)s"


def _build_handler() -> logging.Handler:
    """Return a Rich log handler, or a plain stderr handler without Rich."""
    try:
        from rich.logging import RichHandler

        from user_registry.cli.console import get_rich_console
    except ModuleNotFoundError:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s " + LOG_FORMAT))
        return handler

    handler = RichHandler(
        console=get_rich_console(stderr=True),
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(level: int) -> None:
    """Install a single stderr handler on the root logger at *level*."""
    logging.basicConfig(level=level, handlers=[_build_handler()], force=True)
