"""List command implementation.

Evaluates the configuration and shows the resulting backup list
without touching the repository.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from fossback.cli.display import create_backup_list_table, print_backup_list_summary
from fossback.cli.types import OutputFormat, build_resolver, load_effective_settings
from fossback.errors import BackupError
from fossback.utils.formatting import console, print_error, print_info, printable

app = typer.Typer(
    help="Show the files the next backup would include.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_backup(
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Include/exclude configuration file.",
        ),
    ] = None,
    settings_path: Annotated[
        Path | None,
        typer.Option("--settings", help="Settings file to load."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Show the files the next backup would include."""
    try:
        settings = load_effective_settings(settings_path, config_file=config_file)
        resolver = build_resolver(settings.effective_config_file)
    except BackupError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        data = [
            {"path": printable(path), "excluded_by_match": resolver.is_glob_excluded(path)}
            for path in resolver.compute_backup_list()
        ]
        console.print_json(json.dumps(data))
        return

    if not resolver.compute_backup_list():
        print_info("Backup list is empty.")
        return

    console.print(create_backup_list_table(resolver))
    print_backup_list_summary(resolver)
