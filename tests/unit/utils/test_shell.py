"""Unit tests for shell execution utilities."""

import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from fossback.utils.shell import (
    FS_ENCODING,
    FS_ERRORS,
    CommandResult,
    command_exists,
    run_command,
)


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success(self) -> None:
        """Exit status 0 is success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success

    def test_failure(self) -> None:
        """Any other exit status is failure."""
        assert not CommandResult(stdout="", stderr="", returncode=1).success


class TestRunCommand:
    """Tests for run_command function."""

    @patch("fossback.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """Output and exit status are returned as a CommandResult."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["fossil", "version"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        assert mock_run.call_args.kwargs["capture_output"] is True
        assert mock_run.call_args.kwargs["text"] is True

    @patch("fossback.utils.shell.subprocess.run")
    def test_passes_cwd_and_input(self, mock_run: MagicMock) -> None:
        """Working directory and standard input are forwarded."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["cpio", "-pdlmu", "/tmp/x"], cwd="/", input_text="etc/fstab\n")

        assert mock_run.call_args.kwargs["cwd"] == "/"
        assert mock_run.call_args.kwargs["input"] == "etc/fstab\n"

    @patch("fossback.utils.shell.subprocess.run")
    def test_no_timeout_by_default(self, mock_run: MagicMock) -> None:
        """Commands run until they exit unless a timeout is given."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["fossil", "commit"])

        assert mock_run.call_args.kwargs["timeout"] is None

    def test_feeds_stdin(self) -> None:
        """Standard input reaches the child process."""
        result = run_command(["cat"], input_text="hello\n")

        assert result.stdout == "hello\n"
        assert result.success

    def test_file_name_codec_round_trip(self) -> None:
        """Undecodable name bytes pass through stdin and stdout unchanged."""
        name = os.fsdecode(b"bad\xff.txt")

        result = run_command(
            ["cat"], input_text=name + "\n", encoding=FS_ENCODING, errors=FS_ERRORS
        )

        assert result.stdout == name + "\n"
        assert os.fsencode(result.stdout) == b"bad\xff.txt\n"

    def test_check_raises(self) -> None:
        """check=True raises on a non-zero exit."""
        with pytest.raises(subprocess.CalledProcessError):
            run_command(["false"], check=True)

    def test_raises_file_not_found(self) -> None:
        """Missing executables raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            run_command(["nonexistent_command_xyz_12345"])


class TestCommandExists:
    """Tests for command_exists function."""

    def test_existing_command(self) -> None:
        """A command on PATH exists."""
        assert command_exists("sh")

    def test_missing_command(self) -> None:
        """An unknown command does not exist."""
        assert not command_exists("nonexistent_command_xyz_12345")
