"""Backup settings.

This module provides the settings model and I/O functions for fossback.
Settings name the repository, the external tools, and the policy flags
of a backup run. Every value can be overridden on the command line.

Settings are stored in ~/.config/fossback/settings.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fossback.core.paths import get_backup_config_path, get_settings_path
from fossback.errors import SettingsError

logger = logging.getLogger(__name__)


class BackupSettings(BaseModel):
    """Settings for a backup run.

    Attributes:
        config_file: Include/exclude configuration file (None = default path).
        repository: Fossil repository file receiving the revisions.
        project_name: Project name recorded when the repository is created.
        author: Commit author (None = fossil's default user).
        fossil: Fossil executable.
        cpio: cpio executable.
        work_dir: Parent directory for checkouts (None = state directory).
        clear_before_populate: Delete previously tracked files before linking.
        apply_exclude_globs: Honour exclude-match patterns when linking.
    """

    model_config = ConfigDict(extra="forbid")

    config_file: Annotated[
        Path | None,
        Field(description="Include/exclude configuration file"),
    ] = None
    repository: Annotated[
        Path | None,
        Field(description="Fossil repository path"),
    ] = None
    project_name: Annotated[
        str,
        Field(min_length=1, description="Project name stored in a new repository"),
    ] = "backup"
    author: Annotated[
        str | None,
        Field(description="Commit author"),
    ] = None
    fossil: Annotated[
        str,
        Field(min_length=1, description="Fossil executable"),
    ] = "fossil"
    cpio: Annotated[
        str,
        Field(min_length=1, description="cpio executable"),
    ] = "cpio"
    work_dir: Annotated[
        Path | None,
        Field(description="Parent directory for checkouts"),
    ] = None
    clear_before_populate: bool = True
    apply_exclude_globs: bool = True

    @property
    def effective_config_file(self) -> Path:
        """Configured include/exclude file, or the default location."""
        if self.config_file is not None:
            return self.config_file.expanduser()
        return get_backup_config_path()


def load_settings(path: Path | None = None) -> BackupSettings:
    """Load settings from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the settings file. If None, uses the default settings path.

    Returns:
        Validated BackupSettings object.

    Raises:
        SettingsError: If the file cannot be read, parsed, or validated.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return BackupSettings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings {settings_path}: {e}") from e

    try:
        return BackupSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e


def save_settings(settings: BackupSettings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The BackupSettings object to save.
        path: Path to save the settings. If None, uses the default settings path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    data = settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings {settings_path}: {e}") from e

    return settings_path


def settings_to_dict(settings: BackupSettings) -> dict[str, object]:
    """Convert settings to a TOML-serializable dictionary.

    None values are left out since TOML has no null.
    """
    result: dict[str, object] = {}
    for key, value in settings.model_dump().items():
        if value is None:
            continue
        result[key] = str(value) if isinstance(value, Path) else value
    return result
