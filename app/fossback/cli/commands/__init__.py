"""CLI commands for fossback.

This package contains all subcommand implementations.
"""

from fossback.cli.commands import listing, run, settings

__all__ = ["listing", "run", "settings"]
