"""Backup set resolution.

Accumulates include and exclude paths (expanded through PathScanner)
plus a list of exclude-match glob patterns, and computes the final
backup list as the sorted difference of the two sets.

Glob patterns are not folded into the backup list. They
are checked when the checkout is populated, so a path excluded only by
a pattern still shows up in the backup list and in its diagnostic dump.
"""

import fnmatch
import logging
import os
from collections.abc import Iterable

from fossback.backupset.scanner import PathScanner

logger = logging.getLogger(__name__)


class SetResolver:
    """Accumulates include/exclude directives for one backup run.

    Args:
        scanner: Scanner used to expand path arguments. Defaults to a
            PathScanner for the current identity.
    """

    def __init__(self, scanner: PathScanner | None = None) -> None:
        self._scanner = scanner if scanner is not None else PathScanner()
        self._include: list[str] = []
        self._exclude: list[str] = []
        self._exclude_globs: list[str] = []
        self._backup_list: tuple[str, ...] | None = None

    @property
    def include(self) -> list[str]:
        """Accumulated include paths (may contain duplicates)."""
        return list(self._include)

    @property
    def exclude(self) -> list[str]:
        """Accumulated exclude paths (may contain duplicates)."""
        return list(self._exclude)

    @property
    def exclude_globs(self) -> list[str]:
        """Current exclude-match patterns."""
        return list(self._exclude_globs)

    def add_include(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        """Resolve path arguments and append them to the include set."""
        self._check_open()
        for path in paths:
            found = self._scanner.resolve(path)
            logger.debug("include %s -> %d file(s)", path, len(found))
            self._include.extend(found)

    def add_exclude(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        """Resolve path arguments and append them to the exclude set."""
        self._check_open()
        for path in paths:
            found = self._scanner.resolve(path)
            logger.debug("exclude %s -> %d file(s)", path, len(found))
            self._exclude.extend(found)

    def set_exclude_globs(self, patterns: Iterable[str]) -> None:
        """Replace the exclude-match pattern list."""
        self._check_open()
        self._exclude_globs = list(patterns)

    def compute_backup_list(self) -> tuple[str, ...]:
        """Compute the sorted, deduplicated include-minus-exclude list.

        The result is cached; later calls return the same tuple and the
        accumulators can no longer be modified.

        Returns:
            Backup list in code-point order.
        """
        if self._backup_list is None:
            excluded = set(self._exclude)
            self._backup_list = tuple(sorted(set(self._include) - excluded))
            logger.debug(
                "Backup list: %d included, %d excluded, %d selected",
                len(self._include),
                len(excluded),
                len(self._backup_list),
            )
        return self._backup_list

    def is_glob_excluded(self, path: str) -> bool:
        """Check whether a path matches any exclude-match pattern."""
        return any(fnmatch.fnmatchcase(path, pattern) for pattern in self._exclude_globs)

    def populate_list(self) -> list[str]:
        """Backup list entries that survive the exclude-match patterns."""
        return [p for p in self.compute_backup_list() if not self.is_glob_excluded(p)]

    def glob_excluded(self) -> list[str]:
        """Backup list entries dropped by the exclude-match patterns."""
        return [p for p in self.compute_backup_list() if self.is_glob_excluded(p)]

    def _check_open(self) -> None:
        if self._backup_list is not None:
            msg = "Backup list already computed; directives can no longer change"
            raise RuntimeError(msg)
