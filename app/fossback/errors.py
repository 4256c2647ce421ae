"""Exception hierarchy for fossback.

Every error that can end a backup run derives from BackupError so the
CLI can report it uniformly and exit with a non-zero status.
"""


class BackupError(Exception):
    """Base exception for all fossback errors."""


class ConfigError(BackupError):
    """Raised when the backup configuration cannot be read or parsed."""


class SettingsError(BackupError):
    """Raised when settings.toml cannot be read, parsed, or written."""


class RepoPermissionError(BackupError):
    """Raised when an existing repository is not readable and writable."""


class CheckoutError(BackupError):
    """Raised when the checkout directory cannot be created or cleared."""


class ScanError(BackupError):
    """Unreadable path encountered during scanning.

    The scanner skips such paths silently; this type exists so callers
    that want strict scanning can raise it themselves.
    """


class SubprocessError(BackupError):
    """Raised when an external tool fails or reports unexpected output.

    Attributes:
        command: Command line that was executed.
        returncode: Exit status of the command (None if it never started).
        stderr: Error output captured from the command.
    """

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"{' '.join(command)}: {detail}")


class CleanupError(BackupError):
    """Raised when the checkout cannot be closed or removed."""
