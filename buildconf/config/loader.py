"""Configuration loading for buildconf.

This module handles loading registry configuration from YAML files
and environment variables.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: RegistrySettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import RegistrySettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_CONFIG = """# buildconf registry configuration

log_level: "info"

# Workspace roots (paths or file:// URIs). The first root is the default
# root used when callers do not name one.
workspace_roots: []

# User-scope preferences holding `cpp.buildConfigurations`
# Default: $BUILDCONF_HOME/config/preferences.yaml
# preferences_file: "~/.buildconf/config/preferences.yaml"

# Durable storage for the active configuration per root
# Default: $BUILDCONF_HOME/state/storage.json
# storage_file: "~/.buildconf/state/storage.json"

# Where merged compile_commands.json files are written
# Default: $BUILDCONF_HOME/cache/compile-commands
# merged_database_dir: "/tmp/compile-commands"

# Revalidate every root when preferences change (default: default root only)
revalidate_all_roots: false
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to buildconf.yaml in config directory

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "buildconf.yaml"
    """
    return get_config_dir() / "buildconf.yaml"


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None) -> RegistrySettings:
    """Load registry configuration from YAML and environment.

    Environment variables take precedence over YAML settings.
    Variables should be prefixed with BUILDCONF_ (e.g., BUILDCONF_LOG_LEVEL).

    Args:
        config_path: Optional config file path (default: buildconf.yaml in config dir)

    Returns:
        Validated registry settings
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        create_default_config()

    yaml_settings = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")

    if not isinstance(yaml_settings, dict):
        logger.warning(f"Ignoring config file {config_path}: top level is not a mapping")
        yaml_settings = {}

    # Only pass YAML values that don't have corresponding env vars
    filtered_yaml = {}
    for key, value in yaml_settings.items():
        env_key = f"BUILDCONF_{key.upper()}"
        if env_key not in os.environ:
            filtered_yaml[key] = value

    settings = RegistrySettings(**filtered_yaml)

    logger.info(
        f"Registry configuration loaded: roots={len(settings.workspace_roots)}, log_level={settings.log_level}"
    )

    return settings


def configure_logging(log_level: str = "info") -> None:
    """Configure root logging for the registry.

    Args:
        log_level: Level name (debug, info, warning, error)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
