"""Build configuration models.

This module contains the data models for build configuration management:
- BuildConfiguration value type supplied by the configuration source
- Persisted snapshot of the active configuration map
- Validation model for preference file entries
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


@dataclass(frozen=True)
class BuildConfiguration:
    """A named build configuration.

    Attributes:
        name: Human-readable identifier (blank means invalid)
        directory: Build directory holding compile_commands.json (blank means invalid)
        commands: Opaque command set, compared by identity
    """

    name: str = ""
    directory: str = ""
    commands: Mapping[str, Any] | None = None

    def is_valid(self) -> bool:
        """Check that both name and directory are set."""
        return self.name != "" and self.directory != ""

    def same_as(self, other: BuildConfiguration) -> bool:
        """Match on name and directory only."""
        return self.name == other.name and self.directory == other.directory

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "directory": self.directory,
            "commands": dict(self.commands) if self.commands is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BuildConfiguration:
        """Load from dictionary."""
        return cls(
            name=data.get("name", ""),
            directory=data.get("directory", ""),
            commands=data.get("commands"),
        )


def is_build_configuration(arg: Any) -> bool:
    """Structural check for objects carrying a name and a directory."""
    if isinstance(arg, Mapping):
        return arg.get("name") is not None and arg.get("directory") is not None
    return getattr(arg, "name", None) is not None and getattr(arg, "directory", None) is not None


def equals(a: BuildConfiguration, b: BuildConfiguration) -> bool:
    """Full equality: name, directory and the very same command set."""
    return a.name == b.name and a.directory == b.directory and a.commands is b.commands


class BuildConfigurationEntry(BaseModel):
    """One entry of the ``cpp.buildConfigurations`` preference list."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    directory: str = ""
    commands: dict[str, Any] | None = None

    def to_configuration(self) -> BuildConfiguration:
        return BuildConfiguration(name=self.name, directory=self.directory, commands=self.commands)


class SavedActiveBuildConfigurations(BaseModel):
    """Representation of all saved active build configurations per workspace root."""

    configs: list[tuple[str, BuildConfigurationEntry | None]] = Field(default_factory=list)

    @classmethod
    def from_map(cls, active: Mapping[str, BuildConfiguration | None]) -> SavedActiveBuildConfigurations:
        """Build the snapshot from an active configuration map, keeping insertion order."""
        return cls(
            configs=[
                (root, BuildConfigurationEntry(**config.to_dict()) if config is not None else None)
                for root, config in active.items()
            ]
        )

    def to_map(self) -> dict[str, BuildConfiguration | None]:
        """Rebuild the active configuration map."""
        return {
            root: entry.to_configuration() if entry is not None else None
            for root, entry in self.configs
        }
