"""Checkout lifecycle for one backup run.

Drives the strictly sequential steps of a run::

    INIT -> REPO_READY -> OPEN -> CLEARED -> POPULATED -> COMMITTED -> CLOSED

The checkout directory is the only resource a run acquires. It is held
by the checkout() context manager, which closes and removes it on every
exit path. When a step inside the checkout fails, the original error
propagates; a failure of the cleanup itself is logged and attached to
that error as a note instead of replacing it.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from fossback.core.paths import ensure_work_dir
from fossback.errors import BackupError, CheckoutError, CleanupError, RepoPermissionError
from fossback.storage.fossil import CONTROL_FILES, FossilBackend, hash_mode_for
from fossback.storage.linker import CpioLinker

if TYPE_CHECKING:
    from fossback.backupset.resolver import SetResolver
    from fossback.core.context import RunContext

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """Step a backup run has completed."""

    INIT = "init"
    REPO_READY = "repo_ready"
    OPEN = "open"
    CLEARED = "cleared"
    POPULATED = "populated"
    COMMITTED = "committed"
    CLOSED = "closed"


class CheckoutLifecycle:
    """Sequences repository, checkout, population, and commit for one run.

    Args:
        context: Settings of the run.
        backend: Fossil adapter. Defaults to one using context.fossil.
        linker: cpio adapter. Defaults to one using context.cpio.
    """

    def __init__(
        self,
        context: RunContext,
        *,
        backend: FossilBackend | None = None,
        linker: CpioLinker | None = None,
    ) -> None:
        self._context = context
        self._backend = backend if backend is not None else FossilBackend(context.fossil)
        self._linker = linker if linker is not None else CpioLinker(context.cpio)
        self._state = LifecycleState.INIT
        self._checkout_dir: Path | None = None
        self._protocol_version: int | None = None

    @property
    def state(self) -> LifecycleState:
        """Last completed step."""
        return self._state

    @property
    def checkout_dir(self) -> Path | None:
        """Checkout directory while one is open."""
        return self._checkout_dir

    @property
    def protocol_version(self) -> int | None:
        """Fossil major version, known once the repository is ready."""
        return self._protocol_version

    def run(self, resolver: SetResolver) -> str:
        """Run every step and return the summary of the new revision.

        Raises:
            BackupError: If any step fails. The checkout is gone either way.
        """
        backup_list = resolver.compute_backup_list()
        logger.info("Backing up %d file(s) to %s", len(backup_list), self._context.repository)

        self.ensure_repository()
        with self.checkout():
            self.clear_tracked()
            self.populate(resolver)
            self.commit()
        return self.summary()

    def ensure_repository(self) -> None:
        """Create the repository if missing, else check it is readable and writable.

        Raises:
            RepoPermissionError: If an existing repository lacks read/write access.
            SubprocessError: If fossil fails.
        """
        self._expect(LifecycleState.INIT, "prepare the repository")
        repository = self._context.repository

        try:
            exists = repository.exists()
        except OSError as e:
            raise RepoPermissionError(f"Cannot access repository {repository}: {e}") from e

        if exists:
            if not os.access(repository, os.R_OK | os.W_OK):
                msg = f"Repository is not readable and writable: {repository}"
                raise RepoPermissionError(msg)
        else:
            self._create_repository(repository)

        self._protocol_version = self._backend.protocol_version()
        logger.debug("fossil protocol version %d", self._protocol_version)
        self._state = LifecycleState.REPO_READY

    def _create_repository(self, repository: Path) -> None:
        logger.info("Creating repository %s", repository)
        try:
            repository.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupError(f"Cannot create repository directory {repository.parent}: {e}") from e

        self._backend.init(repository)
        try:
            self._backend.set_metadata(repository, "project-name", self._context.project_name)
        except BaseException:
            # half-initialized repository
            repository.unlink(missing_ok=True)
            raise

    @contextmanager
    def checkout(self) -> Iterator[Path]:
        """Open a fresh checkout and guarantee its removal.

        Yields:
            The checkout directory.
        """
        checkout = self.open_checkout()
        try:
            yield checkout
        except BaseException as exc:
            try:
                self.close()
            except CleanupError as cleanup_exc:
                logger.error("Cleanup after failed run also failed: %s", cleanup_exc)
                exc.add_note(f"Cleanup also failed: {cleanup_exc}")
            raise
        self.close()

    def open_checkout(self) -> Path:
        """Create an empty checkout directory and open the repository in it.

        Returns:
            The checkout directory.
        """
        self._expect(LifecycleState.REPO_READY, "open a checkout")
        try:
            parent = ensure_work_dir(self._context.work_dir)
            checkout = Path(
                tempfile.mkdtemp(
                    prefix=f"{self._context.project_name}-{self._context.date_label}-",
                    dir=parent,
                )
            )
        except (OSError, RuntimeError) as e:
            raise CheckoutError(f"Cannot create checkout directory: {e}") from e

        self._backend.bind(checkout)
        try:
            self._backend.open(self._context.repository)
        except BaseException:
            self._backend.unbind()
            shutil.rmtree(checkout, ignore_errors=True)
            raise

        logger.debug("Opened checkout %s", checkout)
        self._checkout_dir = checkout
        self._state = LifecycleState.OPEN
        return checkout

    def clear_tracked(self) -> None:
        """Delete files of the previous revision from the checkout.

        Raises:
            CheckoutError: If a tracked file cannot be removed.
        """
        self._expect(LifecycleState.OPEN, "clear the checkout")
        checkout = self._require_checkout()

        if not self._context.clear_before_populate:
            logger.debug("Keeping previously tracked files")
            self._state = LifecycleState.CLEARED
            return

        tracked = self._backend.list_tracked_files()
        parents: set[Path] = set()
        for name in tracked:
            relative = PurePosixPath(name)
            if relative.is_absolute() or ".." in relative.parts:
                logger.warning("Ignoring tracked path outside checkout: %s", name)
                continue
            target = checkout / relative
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                raise CheckoutError(f"Cannot remove tracked file {name}: {e}") from e
            parents.update(p for p in target.parents if p != checkout and checkout in p.parents)

        for directory in sorted(parents, key=lambda p: len(p.parts), reverse=True):
            try:
                directory.rmdir()
            except OSError:
                # still has content
                continue

        logger.debug("Cleared %d tracked file(s)", len(tracked))
        self._state = LifecycleState.CLEARED

    def populate(self, resolver: SetResolver) -> None:
        """Hard-link the backup list into the checkout."""
        self._expect(LifecycleState.CLEARED, "populate the checkout")
        checkout = self._require_checkout()

        if self._context.apply_exclude_globs:
            paths = resolver.populate_list()
        else:
            paths = list(resolver.compute_backup_list())

        skipped = len(resolver.compute_backup_list()) - len(paths)
        if skipped:
            logger.info("Skipping %d file(s) matching exclude-match patterns", skipped)

        self._linker.link(paths, checkout)
        self._state = LifecycleState.POPULATED

    def commit(self) -> None:
        """Register changes and commit a revision tagged with the run date."""
        self._expect(LifecycleState.POPULATED, "commit")
        version = self._protocol_version if self._protocol_version is not None else 2

        self._backend.register_changes(include_dotfiles=True, ignore_patterns=CONTROL_FILES)
        self._backend.commit(
            message=self._context.commit_message,
            tag=self._context.date_label,
            author=self._context.author,
            allow_empty=True,
            hash_mode=hash_mode_for(version),
        )
        logger.info("Committed revision tagged %s", self._context.date_label)
        self._state = LifecycleState.COMMITTED

    def close(self) -> None:
        """Close the working copy and remove the checkout directory.

        Safe to call more than once; does nothing without an open checkout.

        Raises:
            CleanupError: If closing or removing the checkout failed.
        """
        checkout = self._checkout_dir
        if checkout is None:
            return

        problems: list[str] = []
        try:
            self._backend.close(force=True)
        except BackupError as e:
            problems.append(f"closing checkout failed: {e}")
        finally:
            self._backend.unbind()

        try:
            shutil.rmtree(checkout)
        except FileNotFoundError:
            pass
        except OSError as e:
            problems.append(f"removing {checkout} failed: {e}")

        self._checkout_dir = None
        self._state = LifecycleState.CLOSED
        logger.debug("Closed checkout %s", checkout)

        if problems:
            raise CleanupError("; ".join(problems))

    def summary(self) -> str:
        """Describe the newest revision in the repository."""
        self._expect(LifecycleState.CLOSED, "summarize the run")
        return self._backend.recent_revision_summary(self._context.repository)

    def _expect(self, state: LifecycleState, action: str) -> None:
        if self._state is not state:
            msg = f"Cannot {action} in state '{self._state.value}'"
            raise RuntimeError(msg)

    def _require_checkout(self) -> Path:
        if self._checkout_dir is None:
            msg = "No checkout is open"
            raise RuntimeError(msg)
        return self._checkout_dir
