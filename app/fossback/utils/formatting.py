"""Terminal output for fossback.

A single fixed theme names the roles text plays in the output: status
words, paths, pattern-skipped paths, and revision labels.

File names are carried around as ``str`` with surrogate escapes for
bytes that do not decode (the os.fsdecode convention). Such strings
cannot be written to a terminal, so everything printed goes through
printable() first.
"""

import os
import sys

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "bold red",
        "muted": "grey50",
        "border": "blue",
        "bold_header": "bold cyan",
        "path": "default",
        "excluded": "strike magenta",
        "revision": "bold green",
    }
)

console = Console(theme=THEME)
err_console = Console(theme=THEME, stderr=True)


def printable(text: str) -> str:
    """Replace undecodable file name bytes with U+FFFD."""
    return os.fsencode(text).decode(sys.getfilesystemencoding(), "replace")


def path_markup(path: str) -> str:
    """Render a file name for use inside Rich markup."""
    return escape(printable(path))


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{printable(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    err_console.print(f"[warning]Warning:[/] {printable(message)}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[error]Error:[/] {printable(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{printable(message)}[/]")
