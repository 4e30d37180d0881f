"""user-registry: a small user registry with JSON file persistence.

A single-shot command-line tool built around an in-memory record store
with a strict layered architecture.
"""

from user_registry.version import __version__

__all__: list[str] = ["__version__"]
