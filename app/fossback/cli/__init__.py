"""CLI package for fossback.

This package contains the Typer application and all subcommands.
"""

from fossback.cli.main import app

__all__ = ["app"]
