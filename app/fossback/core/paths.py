"""XDG-compliant path management for fossback.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/fossback/
- State: ~/.local/state/fossback/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "fossback"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/fossback/ (or XDG_CONFIG_HOME/fossback/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    Checkout directories are created below it unless a work
    directory is configured.

    Returns:
        Path to ~/.local/state/fossback/ (or XDG_STATE_HOME/fossback/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/fossback/settings.toml.
    """
    return get_config_dir() / "settings.toml"


def get_backup_config_path() -> Path:
    """Get the default include/exclude configuration file path.

    Returns:
        Path to ~/.config/fossback/backup.conf.
    """
    return get_config_dir() / "backup.conf"


def get_work_dir() -> Path:
    """Get the default parent directory for checkouts.

    Returns:
        Path to ~/.local/state/fossback/checkouts/.
    """
    return get_state_dir() / "checkouts"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_work_dir(path: Path | None = None) -> Path:
    """Create the checkout parent directory if it doesn't exist.

    Args:
        path: Explicit work directory. Defaults to get_work_dir().

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(path if path is not None else get_work_dir(), "work")
