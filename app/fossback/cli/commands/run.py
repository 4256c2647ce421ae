"""Run command implementation.

Resolves the backup list from the configuration file and commits it to
the repository as a new revision tagged with today's date.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from fossback.cli.display import print_run_summary
from fossback.cli.types import build_resolver, load_effective_settings
from fossback.core.context import RunContext
from fossback.core.lifecycle import CheckoutLifecycle
from fossback.errors import BackupError
from fossback.utils.formatting import print_error, print_success, print_warning

app = typer.Typer(
    help="Back up the configured files as a new revision.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def run_backup(
    ctx: typer.Context,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Include/exclude configuration file.",
        ),
    ] = None,
    repository: Annotated[
        Path | None,
        typer.Option(
            "--repository",
            "-r",
            help="Fossil repository (created if missing).",
        ),
    ] = None,
    project: Annotated[
        str | None,
        typer.Option(
            "--project",
            "-p",
            help="Project name stored in a new repository.",
        ),
    ] = None,
    author: Annotated[
        str | None,
        typer.Option("--author", help="Commit author."),
    ] = None,
    fossil: Annotated[
        str | None,
        typer.Option("--fossil", help="Path to the fossil executable."),
    ] = None,
    cpio: Annotated[
        str | None,
        typer.Option("--cpio", help="Path to the cpio executable."),
    ] = None,
    settings_path: Annotated[
        Path | None,
        typer.Option("--settings", help="Settings file to load."),
    ] = None,
    no_clear: Annotated[
        bool,
        typer.Option(
            "--no-clear",
            help="Keep files of the previous revision instead of clearing them first.",
        ),
    ] = False,
    no_exclude_match: Annotated[
        bool,
        typer.Option(
            "--no-exclude-match",
            help="Ignore exclude-match patterns when linking files.",
        ),
    ] = False,
) -> None:
    """Back up the configured files as a new revision."""
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))

    try:
        settings = load_effective_settings(
            settings_path,
            config_file=config_file,
            repository=repository,
            project_name=project,
            author=author,
            fossil=fossil,
            cpio=cpio,
            clear_before_populate=False if no_clear else None,
            apply_exclude_globs=False if no_exclude_match else None,
        )
        context = RunContext.from_settings(settings)
        resolver = build_resolver(settings.effective_config_file)
        summary = CheckoutLifecycle(context).run(resolver)
    except BackupError as e:
        print_error(escape(str(e)))
        for note in getattr(e, "__notes__", ()):
            print_warning(escape(note))
        raise typer.Exit(code=1) from e

    if not quiet:
        print_run_summary(context, summary)
    if context.apply_exclude_globs:
        committed = resolver.populate_list()
    else:
        committed = resolver.compute_backup_list()
    print_success(f"Backup of {len(committed)} file(s) committed.")
