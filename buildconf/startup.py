"""Wiring of the build configuration registry.

Builds the default collaborators from settings and brings the manager to
its ready state.
"""

import logging

from .config import RegistrySettings
from .config import configure_logging
from .config import load_config
from .services import BuildConfigurationManagerImpl
from .services import CompileCommandsMerger
from .services import PreferenceConfigurationSource
from .services import StaticWorkspaceRoots
from .storage import JsonKeyValueStore

logger = logging.getLogger(__name__)


def create_build_configuration_manager(
    settings: RegistrySettings,
) -> tuple[BuildConfigurationManagerImpl, PreferenceConfigurationSource]:
    """Create a manager with file-backed collaborators.

    Args:
        settings: Registry settings

    Returns:
        The manager and its configuration source (call ``load`` on it)
    """
    workspace_roots = StaticWorkspaceRoots(settings.workspace_roots)
    source = PreferenceConfigurationSource(settings.preferences_file, workspace_roots)
    manager = BuildConfigurationManagerImpl(
        configuration_source=source,
        workspace_roots=workspace_roots,
        storage=JsonKeyValueStore(settings.storage_file),
        merger=CompileCommandsMerger(settings.merged_database_dir),
        revalidate_all_roots=settings.revalidate_all_roots,
    )
    return manager, source


async def start_registry(
    settings: RegistrySettings | None = None,
) -> tuple[BuildConfigurationManagerImpl, PreferenceConfigurationSource]:
    """Load configuration, start the manager and wait until it is ready.

    Args:
        settings: Registry settings (default: loaded from buildconf.yaml and env)

    Returns:
        The ready manager and its configuration source
    """
    if settings is None:
        settings = load_config()
    configure_logging(settings.log_level)

    manager, source = create_build_configuration_manager(settings)
    manager.start()
    await source.load()
    await manager.ready

    logger.info(f"Build configuration registry started for roots: {settings.workspace_roots}")
    return manager, source
