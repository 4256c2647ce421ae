"""Unit tests for the Fossil storage backend."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fossback.errors import SubprocessError
from fossback.storage.fossil import (
    CONTROL_FILES,
    FossilBackend,
    HashMode,
    hash_mode_for,
)
from fossback.utils.shell import FS_ENCODING, FS_ERRORS, CommandResult


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


@pytest.fixture
def bound_backend(tmp_path: Path) -> FossilBackend:
    """Backend bound to a checkout directory."""
    backend = FossilBackend("/usr/bin/fossil")
    backend.bind(tmp_path)
    return backend


class TestHashModeFor:
    """Tests for hash_mode_for function."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [(1, HashMode.SHA1SUM), (2, HashMode.HASH), (3, HashMode.HASH)],
    )
    def test_flag_by_major_version(self, version: int, expected: HashMode) -> None:
        """Fossil 1.x uses --sha1sum, later versions --hash."""
        assert hash_mode_for(version) is expected


class TestRepositoryCommands:
    """Tests for repository-level commands."""

    @patch("fossback.storage.fossil.run_command")
    def test_protocol_version(self, mock_run: MagicMock, mock_fossil_version_output: str) -> None:
        """The major version is parsed from `fossil version`."""
        mock_run.return_value = _ok(mock_fossil_version_output)

        assert FossilBackend().protocol_version() == 2
        mock_run.assert_called_once_with(
            ["fossil", "version"], cwd=None, encoding=FS_ENCODING, errors=FS_ERRORS
        )

    @patch("fossback.storage.fossil.run_command")
    def test_protocol_version_legacy(self, mock_run: MagicMock) -> None:
        """Old 1.x releases are recognized."""
        mock_run.return_value = _ok("This is fossil version 1.37 [abc] 2017-01-16\n")

        assert FossilBackend().protocol_version() == 1

    @patch("fossback.storage.fossil.run_command")
    def test_protocol_version_unrecognized(self, mock_run: MagicMock) -> None:
        """Unexpected version output is an error."""
        mock_run.return_value = _ok("hello\n")

        with pytest.raises(SubprocessError, match="unrecognized version output"):
            FossilBackend().protocol_version()

    @patch("fossback.storage.fossil.run_command")
    def test_init(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """init creates the repository file."""
        mock_run.return_value = _ok()
        repo = tmp_path / "backup.fossil"

        FossilBackend().init(repo)

        mock_run.assert_called_once_with(
            ["fossil", "init", str(repo)], cwd=None, encoding=FS_ENCODING, errors=FS_ERRORS
        )

    @patch("fossback.storage.fossil.run_command")
    def test_set_metadata_quotes_values(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Metadata is written to the config table with SQL quoting."""
        mock_run.return_value = _ok()
        repo = tmp_path / "backup.fossil"

        FossilBackend().set_metadata(repo, "project-name", "alice's home")

        args = mock_run.call_args.args[0]
        assert args[:4] == ["fossil", "sqlite3", "-R", str(repo)]
        assert "REPLACE INTO config(name, value, mtime)" in args[4]
        assert "'project-name'" in args[4]
        assert "'alice''s home'" in args[4]

    @patch("fossback.storage.fossil.run_command")
    def test_recent_revision_summary(
        self, mock_run: MagicMock, tmp_path: Path, mock_timeline_output: str
    ) -> None:
        """The newest check-in is read from the timeline."""
        mock_run.return_value = _ok(mock_timeline_output)
        repo = tmp_path / "backup.fossil"

        summary = FossilBackend().recent_revision_summary(repo)

        assert "ADDED data/dir/x.log" in summary
        assert mock_run.call_args.args[0] == [
            "fossil",
            "timeline",
            "-n",
            "1",
            "-v",
            "-t",
            "ci",
            "-R",
            str(repo),
        ]


class TestCheckoutCommands:
    """Tests for commands that run inside the checkout."""

    @patch("fossback.storage.fossil.run_command")
    def test_open_runs_in_checkout(
        self, mock_run: MagicMock, bound_backend: FossilBackend, tmp_path: Path
    ) -> None:
        """open runs in the bound directory."""
        mock_run.return_value = _ok()
        repo = tmp_path / "backup.fossil"

        bound_backend.open(repo)

        mock_run.assert_called_once_with(
            ["/usr/bin/fossil", "open", str(repo)],
            cwd=str(tmp_path),
            encoding=FS_ENCODING,
            errors=FS_ERRORS,
        )

    def test_unbound_checkout_command_rejected(self, tmp_path: Path) -> None:
        """Checkout-level commands need a bound directory."""
        with pytest.raises(RuntimeError, match="open checkout directory"):
            FossilBackend().open(tmp_path / "backup.fossil")

    def test_unbind_clears_directory(self, bound_backend: FossilBackend) -> None:
        """unbind returns to the caller's directory."""
        bound_backend.unbind()

        assert bound_backend.cwd is None

    @patch("fossback.storage.fossil.run_command")
    def test_list_tracked_files(self, mock_run: MagicMock, bound_backend: FossilBackend) -> None:
        """Tracked files are read one per line."""
        mock_run.return_value = _ok("data/a.txt\ndata/dir/x.log\n\n")

        assert bound_backend.list_tracked_files() == ["data/a.txt", "data/dir/x.log"]

    @patch("fossback.storage.fossil.run_command")
    def test_list_keeps_spaces_in_names(
        self, mock_run: MagicMock, bound_backend: FossilBackend
    ) -> None:
        """Leading and trailing spaces are part of a tracked name."""
        mock_run.return_value = _ok("data/notes \ndata/ lead.txt\n")

        assert bound_backend.list_tracked_files() == ["data/notes ", "data/ lead.txt"]

    @patch("fossback.storage.fossil.run_command")
    def test_list_decodes_names_like_the_filesystem(
        self, mock_run: MagicMock, bound_backend: FossilBackend
    ) -> None:
        """Output is decoded with the file name codec."""
        mock_run.return_value = _ok("data/a.txt\n")

        bound_backend.list_tracked_files()

        assert mock_run.call_args.kwargs["encoding"] == FS_ENCODING
        assert mock_run.call_args.kwargs["errors"] == FS_ERRORS

    @patch("fossback.storage.fossil.run_command")
    def test_register_changes(self, mock_run: MagicMock, bound_backend: FossilBackend) -> None:
        """addremove includes dotfiles and ignores control files."""
        mock_run.return_value = _ok()

        bound_backend.register_changes(include_dotfiles=True, ignore_patterns=CONTROL_FILES)

        assert mock_run.call_args.args[0] == [
            "/usr/bin/fossil",
            "addremove",
            "--dotfiles",
            "--ignore",
            "_FOSSIL_,.fslckout",
        ]

    @patch("fossback.storage.fossil.run_command")
    def test_commit_arguments(self, mock_run: MagicMock, bound_backend: FossilBackend) -> None:
        """commit tags the revision and hashes content."""
        mock_run.return_value = _ok()

        bound_backend.commit(
            "home backup 2024-05-01",
            tag="2024-05-01",
            author="backup-bot",
            allow_empty=True,
            hash_mode=HashMode.SHA1SUM,
        )

        assert mock_run.call_args.args[0] == [
            "/usr/bin/fossil",
            "commit",
            "-m",
            "home backup 2024-05-01",
            "--tag",
            "2024-05-01",
            "--no-warnings",
            "--sha1sum",
            "--user-override",
            "backup-bot",
            "--allow-empty",
        ]

    @patch("fossback.storage.fossil.run_command")
    def test_commit_without_author(
        self, mock_run: MagicMock, bound_backend: FossilBackend
    ) -> None:
        """No author leaves fossil's default user in place."""
        mock_run.return_value = _ok()

        bound_backend.commit("msg", tag="2024-05-01", allow_empty=False)

        args = mock_run.call_args.args[0]
        assert "--user-override" not in args
        assert "--allow-empty" not in args
        assert "--hash" in args

    @patch("fossback.storage.fossil.run_command")
    def test_close_forced(self, mock_run: MagicMock, bound_backend: FossilBackend) -> None:
        """close discards the lock."""
        mock_run.return_value = _ok()

        bound_backend.close(force=True)

        assert mock_run.call_args.args[0] == ["/usr/bin/fossil", "close", "--force"]


class TestFailures:
    """Tests for error handling."""

    @patch("fossback.storage.fossil.run_command")
    def test_nonzero_exit(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """A failing command raises SubprocessError with its output."""
        mock_run.return_value = CommandResult(
            stdout="", stderr="file is not a repository", returncode=1
        )

        with pytest.raises(SubprocessError, match="file is not a repository") as exc_info:
            FossilBackend().init(tmp_path / "x.fossil")

        assert exc_info.value.returncode == 1
        assert exc_info.value.command[:2] == ["fossil", "init"]

    @patch("fossback.storage.fossil.run_command")
    def test_missing_executable(self, mock_run: MagicMock) -> None:
        """A missing binary becomes SubprocessError."""
        mock_run.side_effect = FileNotFoundError("no such file")

        with pytest.raises(SubprocessError, match="cannot execute fossil") as exc_info:
            FossilBackend().protocol_version()

        assert exc_info.value.returncode is None
