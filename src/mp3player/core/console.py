"""Shared Rich consoles: one for status output, one on stderr for diagnostics.

Markup is disabled for printed messages since they routinely contain file
paths with square brackets.
"""

from rich.console import Console

_console: Console | None = None
_error_console: Console | None = None


def get_console() -> Console:
    """Return the stdout console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_error_console() -> Console:
    """Return the stderr console, creating it on first use."""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def safe_print(message: str, style: str | None = None) -> None:
    """Print a status line, optionally styled (e.g. "yellow", "bold cyan")."""
    get_console().print(message, style=style, markup=False)


def print_error(message: str) -> None:
    get_error_console().print(message, style="bold red", markup=False)
