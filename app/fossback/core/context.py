"""Run context for a single backup invocation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from fossback.core.paths import get_work_dir
from fossback.errors import SettingsError

if TYPE_CHECKING:
    from fossback.core.settings import BackupSettings

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True, slots=True)
class RunContext:
    """Read-only state of one backup run.

    Built once from settings after option parsing and passed to the
    lifecycle. The checkout directory and storage protocol version are
    discovered during the run and live on the lifecycle.

    Attributes:
        cwd: Working directory the run started in.
        date_label: Revision tag for this run (YYYY-MM-DD).
        repository: Fossil repository path.
        project_name: Project name for a newly created repository.
        fossil: Fossil executable.
        cpio: cpio executable.
        work_dir: Parent directory for the checkout.
        author: Commit author, None for fossil's default.
        clear_before_populate: Delete tracked files before linking.
        apply_exclude_globs: Honour exclude-match patterns when linking.
    """

    cwd: Path
    date_label: str
    repository: Path
    project_name: str
    fossil: str
    cpio: str
    work_dir: Path
    author: str | None = None
    clear_before_populate: bool = True
    apply_exclude_globs: bool = True

    @property
    def commit_message(self) -> str:
        """Check-in comment for this run."""
        return f"{self.project_name} backup {self.date_label}"

    @classmethod
    def from_settings(
        cls,
        settings: BackupSettings,
        *,
        today: date | None = None,
        cwd: Path | None = None,
    ) -> RunContext:
        """Build a context from validated settings.

        Raises:
            SettingsError: If no repository is configured.
        """
        if settings.repository is None:
            msg = "No repository configured (use --repository or set 'repository' in settings)"
            raise SettingsError(msg)

        start_dir = cwd if cwd is not None else Path.cwd()
        repository = settings.repository.expanduser()
        if not repository.is_absolute():
            repository = start_dir / repository

        return cls(
            cwd=start_dir,
            date_label=(today or date.today()).strftime(DATE_FORMAT),
            repository=repository,
            project_name=settings.project_name,
            fossil=settings.fossil,
            cpio=settings.cpio,
            work_dir=settings.work_dir.expanduser() if settings.work_dir else get_work_dir(),
            author=settings.author,
            clear_before_populate=settings.clear_before_populate,
            apply_exclude_globs=settings.apply_exclude_globs,
        )
