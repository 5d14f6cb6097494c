"""Models for buildconf."""

from .build_configurations import BuildConfiguration
from .build_configurations import BuildConfigurationEntry
from .build_configurations import SavedActiveBuildConfigurations
from .build_configurations import equals
from .build_configurations import is_build_configuration
from .events import ActiveConfigChangeEvent

__all__ = [
    "ActiveConfigChangeEvent",
    "BuildConfiguration",
    "BuildConfigurationEntry",
    "SavedActiveBuildConfigurations",
    "equals",
    "is_build_configuration",
]
