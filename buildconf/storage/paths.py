"""Path resolution for buildconf storage locations.

This module provides path resolution based on BUILDCONF_HOME environment variable,
following XDG-like directory structure within that root.

Contract:
- Inputs: Environment variables (BUILDCONF_HOME and per-directory overrides)
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

import os
from pathlib import Path


def get_home_dir() -> Path:
    """Get BUILDCONF_HOME from environment.

    Returns:
        Path to root directory (default: .buildconf)
    """
    root = os.environ.get("BUILDCONF_HOME", ".buildconf")
    return Path(root).resolve()


def _resolve_dir(name: str, env_var: str) -> Path:
    directory: Path = get_home_dir() / name

    env_override: str | None = os.environ.get(env_var)
    if env_override is not None:
        directory = Path(env_override).resolve()

    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_config_dir() -> Path:
    """Get configuration directory.

    Returns:
        Path to config directory ($BUILDCONF_HOME/config)

    Environment Variables:
        BUILDCONF_CONFIG_DIR: Override config directory location
    """
    return _resolve_dir("config", "BUILDCONF_CONFIG_DIR")


def get_state_dir() -> Path:
    """Get state directory.

    Holds the durable key-value store with the active configuration snapshot.

    Returns:
        Path to state directory ($BUILDCONF_HOME/state)
    """
    return _resolve_dir("state", "BUILDCONF_STATE_DIR")


def get_cache_dir() -> Path:
    """Get cache directory.

    Returns:
        Path to cache directory ($BUILDCONF_HOME/cache)
    """
    return _resolve_dir("cache", "BUILDCONF_CACHE_DIR")


def get_merged_databases_dir() -> Path:
    """Get directory for merged compilation databases.

    Returns:
        Path to merged databases ($BUILDCONF_HOME/cache/compile-commands)
    """
    merged_dir = get_cache_dir() / "compile-commands"
    merged_dir.mkdir(parents=True, exist_ok=True)
    return merged_dir
