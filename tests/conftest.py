"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from datetime import date
from pathlib import Path

import pytest
from fossback.core.context import RunContext


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at a temporary location for every test."""
    base = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def data_tree(tmp_path: Path) -> Path:
    """Create a small source tree to back up.

    Layout::

        data/
            a.txt
            b.txt
            dir/
                x.log
                x.tar.gz
                nested/
                    deep.txt
    """
    root = tmp_path / "data"
    (root / "dir" / "nested").mkdir(parents=True)
    (root / "a.txt").write_text("alpha")
    (root / "b.txt").write_text("beta")
    (root / "dir" / "x.log").write_text("log line")
    (root / "dir" / "x.tar.gz").write_bytes(b"\x1f\x8b")
    (root / "dir" / "nested" / "deep.txt").write_text("deep")
    return root


@pytest.fixture
def run_context(tmp_path: Path) -> RunContext:
    """RunContext pointing at a repository and work dir under tmp_path."""
    return RunContext(
        cwd=tmp_path,
        date_label="2024-05-01",
        repository=tmp_path / "repo" / "backup.fossil",
        project_name="home",
        fossil="fossil",
        cpio="cpio",
        work_dir=tmp_path / "work",
        author="backup-bot",
    )


@pytest.fixture
def today() -> date:
    """Fixed run date."""
    return date(2024, 5, 1)


@pytest.fixture
def mock_fossil_version_output() -> str:
    """Sample `fossil version` output."""
    return "This is fossil version 2.23 [47362306a7] 2023-11-01 18:56:47 UTC\n"


@pytest.fixture
def mock_timeline_output() -> str:
    """Sample `fossil timeline -n 1 -v` output."""
    return """=== 2024-05-01 ===
12:00:01 [8c1f0e2a47] *CURRENT* home backup 2024-05-01 (user: backup-bot tags: trunk, 2024-05-01)
   EDITED data/a.txt
   ADDED data/dir/x.log
--- entry limit (1) reached ---
"""
