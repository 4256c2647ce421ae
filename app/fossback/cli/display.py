"""Shared Rich display functions for backup lists and run results."""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fossback.backupset.resolver import SetResolver
from fossback.core.context import RunContext
from fossback.utils.formatting import console, path_markup, printable


def create_backup_list_table(resolver: SetResolver) -> Table:
    """Create a Rich table of the backup list.

    Entries matching an exclude-match pattern are listed too, marked as
    skipped, because the patterns only apply when the checkout is
    populated.

    Args:
        resolver: Resolver whose backup list is shown.

    Returns:
        Rich Table with Status and Path columns.
    """
    table = Table(
        title="Backup List",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Path", no_wrap=True)

    for path in resolver.compute_backup_list():
        if resolver.is_glob_excluded(path):
            table.add_row("[muted]skip[/muted]", f"[excluded]{path_markup(path)}[/excluded]")
        else:
            table.add_row("[success]link[/success]", f"[path]{path_markup(path)}[/path]")

    return table


def print_backup_list_summary(resolver: SetResolver) -> None:
    """Print counts of linked and pattern-skipped files."""
    total = len(resolver.compute_backup_list())
    skipped = len(resolver.glob_excluded())
    console.print(f"\n[muted]{total} file(s) selected, {skipped} skipped by exclude-match[/muted]")


def print_run_summary(context: RunContext, summary: str) -> None:
    """Print the newest revision after a successful run.

    Args:
        context: Context of the finished run.
        summary: Timeline text reported by the repository.
    """
    body = printable(summary.strip()) or "(no timeline output)"
    console.print(
        Panel(
            Text(body),
            title=f"[revision]{context.date_label}[/revision] {escape(context.project_name)}",
            subtitle=path_markup(str(context.repository)),
            border_style="border",
        )
    )
