"""Allow ``python -m user_registry`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m user_registry`` behaves identically to the
``user-registry`` console script.
"""

from __future__ import annotations

from user_registry.cli.app import cli

if __name__ == "__main__":
    cli()
