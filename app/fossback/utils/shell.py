"""Shell execution utilities.

Provides subprocess execution for the external backup tools with
proper error handling.
"""

import shutil
import subprocess
import sys
from dataclasses import dataclass

# Same codec as os.fsencode/os.fsdecode
FS_ENCODING = sys.getfilesystemencoding()
FS_ERRORS = sys.getfilesystemencodeerrors()


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    encoding: str | None = None,
    errors: str | None = None,
) -> CommandResult:
    """Execute a command and return the result.

    The call blocks until the command exits and its full output has
    been consumed. There is no timeout unless one is given.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.
        input_text: Text fed to the command's standard input.
        encoding: Codec for input and output. If None, the locale encoding.
        errors: Codec error handler, e.g. "surrogateescape" for file names.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
        input=input_text,
        encoding=encoding,
        errors=errors,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH (or is an executable path).

    Args:
        name: Command name or path to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None
