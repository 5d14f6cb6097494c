"""Per-workspace build configuration registry.

Public Interface:
    - BuildConfiguration: Build configuration value type
    - BuildConfigurationManagerImpl: Active configuration registry
    - BuildConfigurationManager / MultiRootBuildConfigurationManager: Contracts
    - PreferenceConfigurationSource: YAML preference backed configuration source
    - StaticWorkspaceRoots: Workspace root provider
    - JsonKeyValueStore: Durable key-value store
    - CompileCommandsMerger: compile_commands.json merger
    - start_registry: Build and start the registry from settings
"""

from .models import ActiveConfigChangeEvent
from .models import BuildConfiguration
from .models import equals
from .models import is_build_configuration
from .services import BuildConfigurationManager
from .services import BuildConfigurationManagerImpl
from .services import CompileCommandsMerger
from .services import MultiRootBuildConfigurationManager
from .services import PreferenceConfigurationSource
from .services import StaticWorkspaceRoots
from .startup import create_build_configuration_manager
from .startup import start_registry
from .storage import JsonKeyValueStore

__all__ = [
    "ActiveConfigChangeEvent",
    "BuildConfiguration",
    "BuildConfigurationManager",
    "BuildConfigurationManagerImpl",
    "CompileCommandsMerger",
    "JsonKeyValueStore",
    "MultiRootBuildConfigurationManager",
    "PreferenceConfigurationSource",
    "StaticWorkspaceRoots",
    "create_build_configuration_manager",
    "equals",
    "is_build_configuration",
    "start_registry",
]
