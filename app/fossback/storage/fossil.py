"""Fossil storage backend.

Thin adapter over the ``fossil`` command line. Repository-level commands
take the repository path explicitly; checkout-level commands run inside
the working directory the backend is bound to.
"""

import logging
import re
from enum import Enum
from pathlib import Path

from fossback.errors import SubprocessError
from fossback.utils.shell import FS_ENCODING, FS_ERRORS, CommandResult, run_command

logger = logging.getLogger(__name__)

# Checkout control/lock files fossil keeps in the working directory
CONTROL_FILES: tuple[str, ...] = ("_FOSSIL_", ".fslckout")

_VERSION_PATTERN = re.compile(r"version\s+(\d+)\.\d+")


class HashMode(str, Enum):
    """Commit flag that makes fossil hash file content instead of trusting mtimes.

    Hard-linked files keep their original timestamps, so change detection
    must compare content.
    """

    SHA1SUM = "--sha1sum"
    HASH = "--hash"


def hash_mode_for(protocol_version: int) -> HashMode:
    """Pick the content-hash commit flag for a fossil major version."""
    if protocol_version < 2:
        return HashMode.SHA1SUM
    return HashMode.HASH


def _sql_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class FossilBackend:
    """Runs fossil commands for one backup run.

    Args:
        executable: Path or name of the fossil binary.
    """

    def __init__(self, executable: str = "fossil") -> None:
        self._executable = executable
        self._cwd: Path | None = None

    @property
    def executable(self) -> str:
        """Fossil binary used for every command."""
        return self._executable

    @property
    def cwd(self) -> Path | None:
        """Checkout directory checkout-level commands run in, if bound."""
        return self._cwd

    def bind(self, checkout: Path) -> None:
        """Run subsequent checkout-level commands inside ``checkout``."""
        self._cwd = checkout

    def unbind(self) -> None:
        """Return to the caller's working directory."""
        self._cwd = None

    # -- repository level -------------------------------------------------

    def protocol_version(self) -> int:
        """Return the fossil major version.

        Raises:
            SubprocessError: If fossil fails or prints an unrecognized version.
        """
        result = self._run(["version"])
        match = _VERSION_PATTERN.search(result.stdout)
        if match is None:
            raise SubprocessError(
                [self._executable, "version"],
                result.returncode,
                f"unrecognized version output: {result.stdout.strip()!r}",
            )
        return int(match.group(1))

    def init(self, repository: Path) -> None:
        """Create a new repository file."""
        self._run(["init", str(repository)])

    def set_metadata(self, repository: Path, key: str, value: str) -> None:
        """Store a name/value pair in the repository config table."""
        statement = (
            "REPLACE INTO config(name, value, mtime) "
            f"VALUES({_sql_quote(key)}, {_sql_quote(value)}, now())"
        )
        self._run(["sqlite3", "-R", str(repository), statement])

    def recent_revision_summary(self, repository: Path) -> str:
        """Return the timeline entry of the newest check-in, with changed files."""
        result = self._run(["timeline", "-n", "1", "-v", "-t", "ci", "-R", str(repository)])
        return result.stdout

    # -- checkout level ---------------------------------------------------

    def open(self, repository: Path) -> None:
        """Open a working copy of ``repository`` in the bound directory."""
        self._run(["open", str(repository)], scoped=True)

    def list_tracked_files(self) -> list[str]:
        """List files tracked by the checked-out revision, relative to the checkout."""
        result = self._run(["ls"], scoped=True)
        # names may begin or end with spaces
        return [line for line in result.stdout.split("\n") if line]

    def register_changes(
        self,
        include_dotfiles: bool = True,
        ignore_patterns: tuple[str, ...] = CONTROL_FILES,
    ) -> None:
        """Schedule added and removed files for the next commit."""
        args = ["addremove"]
        if include_dotfiles:
            args.append("--dotfiles")
        if ignore_patterns:
            args.extend(["--ignore", ",".join(ignore_patterns)])
        self._run(args, scoped=True)

    def commit(
        self,
        message: str,
        tag: str,
        author: str | None = None,
        allow_empty: bool = True,
        hash_mode: HashMode = HashMode.HASH,
    ) -> None:
        """Create a new revision with warnings suppressed."""
        args = ["commit", "-m", message, "--tag", tag, "--no-warnings", hash_mode.value]
        if author:
            args.extend(["--user-override", author])
        if allow_empty:
            args.append("--allow-empty")
        self._run(args, scoped=True)

    def close(self, force: bool = True) -> None:
        """Close the working copy, discarding any lock."""
        args = ["close"]
        if force:
            args.append("--force")
        self._run(args, scoped=True)

    def _run(self, args: list[str], *, scoped: bool = False) -> CommandResult:
        command = [self._executable, *args]
        cwd: str | None = None
        if scoped:
            if self._cwd is None:
                msg = f"fossil {args[0]} needs an open checkout directory"
                raise RuntimeError(msg)
            cwd = str(self._cwd)

        logger.debug("Running %s (cwd=%s)", " ".join(command), cwd or ".")
        try:
            result = run_command(command, cwd=cwd, encoding=FS_ENCODING, errors=FS_ERRORS)
        except (FileNotFoundError, PermissionError) as e:
            raise SubprocessError(command, None, f"cannot execute {self._executable}: {e}") from e

        if not result.success:
            raise SubprocessError(command, result.returncode, result.stderr or result.stdout)
        return result
