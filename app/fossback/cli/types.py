"""Settings resolution shared by the run and list commands.

Merges settings.toml with command-line overrides and turns the chosen
backup.conf into an evaluated SetResolver.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fossback.backupset.config import ConfigEvaluator
from fossback.backupset.resolver import SetResolver
from fossback.core.settings import BackupSettings, load_settings
from fossback.errors import SettingsError


class OutputFormat(str, Enum):
    """Output format options for listings."""

    TABLE = "table"
    JSON = "json"


def load_effective_settings(settings_path: Path | None = None, **overrides: Any) -> BackupSettings:
    """Load settings.toml and apply command-line overrides.

    Overrides that are None are ignored.

    Args:
        settings_path: Settings file. If None, uses the default location.
        **overrides: BackupSettings fields given on the command line.

    Returns:
        Validated settings with overrides applied.

    Raises:
        SettingsError: If the settings file or an override is invalid.
    """
    settings = load_settings(settings_path)
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return settings

    try:
        return BackupSettings.model_validate({**settings.model_dump(), **updates})
    except ValidationError as e:
        raise SettingsError(f"Invalid option: {e}") from e


def build_resolver(config_file: Path) -> SetResolver:
    """Evaluate a configuration file into a fresh resolver.

    Raises:
        ConfigError: If the configuration cannot be read or parsed.
    """
    resolver = SetResolver()
    ConfigEvaluator(resolver).evaluate(config_file)
    return resolver
