"""Utility modules for fossback.

This module exports commonly used utility functions.
"""

from fossback.utils.formatting import (
    console,
    err_console,
    path_markup,
    print_error,
    print_info,
    print_success,
    print_warning,
    printable,
)
from fossback.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "path_markup",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "printable",
    "run_command",
]
