"""Settings commands.

Show the effective settings or write a settings.toml with defaults.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from fossback.core.paths import get_settings_path
from fossback.core.settings import BackupSettings, load_settings, save_settings
from fossback.errors import SettingsError
from fossback.utils.formatting import (
    console,
    path_markup,
    print_error,
    print_info,
    print_success,
)
from fossback.utils.shell import command_exists

# Settings naming external executables
_TOOL_KEYS = ("fossil", "cpio")

app = typer.Typer(
    help="Show or create the settings file.",
    no_args_is_help=True,
)


@app.command()
def show(
    settings_path: Annotated[
        Path | None,
        typer.Option("--settings", help="Settings file to load."),
    ] = None,
) -> None:
    """Show the effective settings."""
    path = settings_path or get_settings_path()
    try:
        settings = load_settings(path)
    except SettingsError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    table = Table(
        title="Settings",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Key", style="info", no_wrap=True)
    table.add_column("Value")

    for key, value in settings.model_dump().items():
        shown = "[muted]-[/muted]" if value is None else path_markup(str(value))
        if key in _TOOL_KEYS and not command_exists(str(value)):
            shown += " [warning](not found)[/warning]"
        table.add_row(key, shown)
    table.add_row(
        "[muted]config file in use[/muted]", path_markup(str(settings.effective_config_file))
    )

    console.print(table)
    if not path.exists():
        print_info(f"No settings file at {path}; showing defaults.")


@app.command()
def init(
    repository: Annotated[
        Path | None,
        typer.Option("--repository", "-r", help="Fossil repository path."),
    ] = None,
    project: Annotated[
        str,
        typer.Option("--project", "-p", help="Project name."),
    ] = "backup",
    settings_path: Annotated[
        Path | None,
        typer.Option("--settings", help="Settings file to write."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with default values."""
    path = settings_path or get_settings_path()
    if path.exists() and not force:
        print_error(f"Settings file already exists: {escape(str(path))} (use --force)")
        raise typer.Exit(code=1)

    try:
        settings = BackupSettings(repository=repository, project_name=project)
        written = save_settings(settings, path)
    except (SettingsError, ValueError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {escape(str(written))}")
