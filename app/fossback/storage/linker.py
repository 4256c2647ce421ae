"""Bulk hard-link population through cpio pass-through mode.

``cpio -pdlmu DEST`` reads source paths from standard input and links
each one into DEST, creating directories as needed, keeping
modification times, and overwriting existing files. On exit it reports
a ``N blocks`` trailer on standard error, which is not an error.
"""

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from fossback.errors import SubprocessError
from fossback.utils.shell import FS_ENCODING, FS_ERRORS, run_command

logger = logging.getLogger(__name__)

_BLOCKS_TRAILER = re.compile(r"\d+ blocks?")

# Source paths are fed relative to the filesystem root
_ROOT = "/"


def is_blocks_trailer(text: str) -> bool:
    """Check whether tool output is only the benign ``N blocks`` trailer."""
    return _BLOCKS_TRAILER.fullmatch(text.strip()) is not None


class CpioLinker:
    """Hard-links absolute source paths into a destination tree.

    Args:
        executable: Path or name of the cpio binary.
    """

    def __init__(self, executable: str = "cpio") -> None:
        self._executable = executable

    @property
    def executable(self) -> str:
        """cpio binary used for linking."""
        return self._executable

    def link(self, paths: Sequence[str], destination: Path) -> None:
        """Link every path into ``destination`` under its absolute location.

        ``/data/a.txt`` becomes ``<destination>/data/a.txt``.

        Args:
            paths: Absolute source paths.
            destination: Existing directory to populate.

        Raises:
            SubprocessError: If cpio fails or reports anything other
                than the blocks trailer.
        """
        if not paths:
            logger.debug("Nothing to link into %s", destination)
            return

        command = [self._executable, "-pdlmu", str(destination)]
        feed = "".join(f"{path.lstrip('/')}\n" for path in paths)

        logger.debug("Linking %d path(s) into %s", len(paths), destination)
        try:
            result = run_command(
                command,
                cwd=_ROOT,
                input_text=feed,
                encoding=FS_ENCODING,
                errors=FS_ERRORS,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise SubprocessError(command, None, f"cannot execute {self._executable}: {e}") from e

        stderr = result.stderr.strip()
        if result.success and not stderr:
            return
        if is_blocks_trailer(stderr):
            logger.debug("cpio: %s", stderr)
            return
        raise SubprocessError(command, result.returncode, result.stderr)
