"""Services for buildconf."""

from .build_configuration_manager import ACTIVE_BUILD_CONFIGURATIONS_MAP_STORAGE_KEY
from .build_configuration_manager import BuildConfigurationManagerImpl
from .compilation_database import CompileCommandsMerger
from .configuration_source import CPP_BUILD_CONFIGURATIONS_PREFERENCE_KEY
from .configuration_source import PreferenceConfigurationSource
from .protocols import BuildConfigurationManager
from .protocols import MultiRootBuildConfigurationManager
from .workspace_roots import StaticWorkspaceRoots

__all__ = [
    "ACTIVE_BUILD_CONFIGURATIONS_MAP_STORAGE_KEY",
    "CPP_BUILD_CONFIGURATIONS_PREFERENCE_KEY",
    "BuildConfigurationManager",
    "BuildConfigurationManagerImpl",
    "CompileCommandsMerger",
    "MultiRootBuildConfigurationManager",
    "PreferenceConfigurationSource",
    "StaticWorkspaceRoots",
]
