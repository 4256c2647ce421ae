"""Path scanner that expands include/exclude arguments into files.

Resolves a single path argument to the regular files and symlinks it
denotes, recursing into directories. Readability is checked against the
caller's identity unless the process runs as the superuser, in which
case every path is taken regardless of its permission bits.

Symlinks are never followed. A link is taken when its directory is
searchable, whatever its target: dangling links and links to files the
caller cannot read are backed up as links.
"""

import logging
import os
import stat
from collections.abc import Iterator

logger = logging.getLogger(__name__)


def is_privileged() -> bool:
    """Check whether the process runs with superuser identity."""
    return hasattr(os, "geteuid") and os.geteuid() == 0


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Return the absolute, normalized form of a path argument.

    A leading ``~`` is expanded. Symlinks are not resolved so that a
    link is backed up as a link.
    """
    return os.path.abspath(os.path.expanduser(os.fspath(path)))


class PathScanner:
    """Expands path arguments into regular file and symlink paths.

    Args:
        privileged: Bypass all readability checks. Defaults to whether
            the effective user is root.
    """

    def __init__(self, *, privileged: bool | None = None) -> None:
        self._privileged = is_privileged() if privileged is None else privileged

    @property
    def privileged(self) -> bool:
        """Whether readability checks are bypassed."""
        return self._privileged

    def resolve(self, path: str | os.PathLike[str]) -> list[str]:
        """Resolve a path argument to the files it denotes.

        Args:
            path: File, symlink, or directory to expand.

        Returns:
            Absolute paths of every regular file and symlink found. Empty
            if the path is missing, unreadable, or of another file type.
        """
        absolute = normalize_path(path)
        visited: set[tuple[int, int]] = set()
        return list(self._walk(absolute, visited))

    def _walk(self, path: str, visited: set[tuple[int, int]]) -> Iterator[str]:
        try:
            info = os.lstat(path)
        except OSError as e:
            logger.debug("Cannot stat %s: %s", path, e)
            return

        mode = info.st_mode
        if stat.S_ISLNK(mode):
            # reading a link needs search access to its directory only
            if self._privileged or os.access(os.path.dirname(path), os.X_OK):
                yield path
            else:
                logger.debug("Skipping symlink in unsearchable directory: %s", path)
            return

        if not self._readable(path):
            logger.debug("Skipping unreadable path: %s", path)
            return

        if stat.S_ISREG(mode):
            yield path
            return

        if not stat.S_ISDIR(mode):
            # sockets, devices, fifos
            return

        key = (info.st_dev, info.st_ino)
        if key in visited:
            return
        visited.add(key)

        if not self._privileged and not os.access(path, os.X_OK):
            logger.debug("Skipping unsearchable directory: %s", path)
            return

        try:
            names = sorted(os.listdir(path))
        except OSError as e:
            logger.debug("Cannot list directory %s: %s", path, e)
            return

        for name in names:
            yield from self._walk(os.path.join(path, name), visited)

    def _readable(self, path: str) -> bool:
        if self._privileged:
            return True
        return os.access(path, os.R_OK)
