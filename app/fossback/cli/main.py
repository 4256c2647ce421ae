"""Main CLI application entry point.

Defines the Typer application, global options, and logging setup.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from fossback import __version__
from fossback.cli.commands import listing, run, settings
from fossback.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="fossback",
    help="Incremental file backups into a Fossil repository.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"fossback version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Show debug records.
        quiet: Show errors only.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        if isinstance(handler, RichHandler):
            root_logger.removeHandler(handler)
    root_logger.addHandler(
        RichHandler(console=err_console, show_path=False, show_time=verbose, markup=False)
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """fossback - Incremental file backups into a Fossil repository.

    Select files with include, exclude, and exclude-match directives and
    record them as a dated revision. Files are hard-linked into a
    temporary checkout, so nothing is copied.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(run.app, name="run")
app.add_typer(listing.app, name="list")
app.add_typer(settings.app, name="settings")


if __name__ == "__main__":
    app()
