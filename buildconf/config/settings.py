"""Settings models for buildconf.

This module defines the configuration structure for the build configuration
registry and its default collaborators.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class RegistrySettings(BaseSettings):
    """Configuration for the build configuration registry.

    Attributes:
        log_level: Logging level (default: info)
        workspace_roots: Workspace roots, first one is the default root
        preferences_file: YAML file with user-scope build configurations
        storage_file: JSON file backing the key-value store
        merged_database_dir: Output directory for merged compilation databases
        revalidate_all_roots: Revalidate every root on preference changes,
            not only the default root

    Example:
        >>> settings = RegistrySettings(workspace_roots=["/ws/app"])
        >>> assert settings.workspace_roots == ["file:///ws/app"]
    """

    model_config = SettingsConfigDict(
        env_prefix="BUILDCONF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "info"
    workspace_roots: list[str] = []

    preferences_file: Path | None = None
    storage_file: Path | None = None
    merged_database_dir: Path | None = None

    revalidate_all_roots: bool = False

    @field_validator("workspace_roots")
    @classmethod
    def normalize_roots(cls, v: list[str]) -> list[str]:
        """Turn plain paths into absolute file URIs.

        Values that already carry a URI scheme pass through unchanged, so
        ``file:///ws/app`` and ``/ws/app`` name the same root.

        Args:
            v: Paths or URIs (paths may contain ~ or be relative)

        Returns:
            Root URIs in the given order
        """
        roots = []
        for root in v:
            if "://" in root:
                roots.append(root)
            else:
                roots.append(Path(root).expanduser().resolve().as_uri())
        return roots

    @field_validator("preferences_file", "storage_file", "merged_database_dir")
    @classmethod
    def expand_and_resolve_path(cls, v: Path | None) -> Path | None:
        """Expand ~ and resolve to absolute path."""
        if v is None:
            return None
        return Path(v).expanduser().resolve()
