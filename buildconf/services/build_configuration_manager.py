"""Active build configuration registry.

Tracks, per workspace root, which build configuration is active, persists
that selection through a key-value store, and notifies listeners whenever
the selection changes.

Contract:
- Inputs: Configuration source, workspace roots, key-value store, merger
- Outputs: Active configuration per root, change events
- Side Effects: Writes the active configuration snapshot on every change
"""

import asyncio
import locale
import logging
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from types import MappingProxyType

from pydantic import ValidationError

from buildconf.emitter import Emitter
from buildconf.emitter import Unsubscribe
from buildconf.models import ActiveConfigChangeEvent
from buildconf.models import BuildConfiguration
from buildconf.models import SavedActiveBuildConfigurations

from .protocols import CompilationDatabaseMerger
from .protocols import ConfigurationSource
from .protocols import KeyValueStorage
from .protocols import WorkspaceRootProvider

logger = logging.getLogger(__name__)

ACTIVE_BUILD_CONFIGURATIONS_MAP_STORAGE_KEY = "cpp.active-build-configurations-map"


def collation_key(name: str) -> tuple[str, str]:
    """Sort key comparing names case-insensitively first.

    Ties are broken with lowercase before uppercase (alpha, Alpha, beta, Beta),
    independent of whether the process locale was ever set.
    """
    return locale.strxfrm(name.casefold()), locale.strxfrm(name.swapcase())


class BuildConfigurationManagerImpl:
    """Entry point to list build configurations and get/set the active one.

    One instance per application session. Call ``start()`` (or await
    ``ready``) from a running event loop before trusting the active
    configuration map: until the persisted snapshot is loaded the map is
    empty, and loading replaces it wholesale.

    ``set_active_config`` is synchronous. The in-memory map is updated and
    both change streams fire before it returns, multi-root listeners before
    legacy single-value listeners. The snapshot write is issued as a task
    that callers may await for durability.
    """

    def __init__(
        self,
        configuration_source: ConfigurationSource,
        workspace_roots: WorkspaceRootProvider,
        storage: KeyValueStorage,
        merger: CompilationDatabaseMerger,
        revalidate_all_roots: bool = False,
    ) -> None:
        """Initialize build configuration manager.

        Args:
            configuration_source: Supplies build configurations per root
            workspace_roots: Lists workspace roots (first is the default root)
            storage: Durable store for the active configuration snapshot
            merger: Produces merged compilation databases
            revalidate_all_roots: Revalidate every root on preference changes
                instead of only the default root
        """
        self.configuration_source = configuration_source
        self.workspace_roots = workspace_roots
        self.storage = storage
        self.merger = merger
        self.revalidate_all_roots = revalidate_all_roots

        self._active_configs: dict[str, BuildConfiguration | None] = {}
        self._changes: Emitter[ActiveConfigChangeEvent] = Emitter()
        # Legacy single-value view, fed from each change event after _changes
        self._legacy_changes: Emitter[BuildConfiguration | None] = Emitter()
        self._pending_saves: set[asyncio.Task[None]] = set()
        self._ready_task: asyncio.Task[None] | None = None
        self._unsubscribe_source: Unsubscribe | None = None

    # --- Lifecycle ---

    def start(self) -> asyncio.Task[None]:
        """Begin initialization (idempotent).

        Waits for the configuration source, loads the persisted snapshot and
        then subscribes to configuration changes.

        Returns:
            Task completing when the manager is ready
        """
        if self._ready_task is None:
            self._ready_task = asyncio.get_running_loop().create_task(self._initialize())
        return self._ready_task

    @property
    def ready(self) -> asyncio.Task[None]:
        """Completes once preferences and the persisted snapshot are loaded."""
        return self.start()

    async def _initialize(self) -> None:
        await self.configuration_source.ready
        await self._load_active_configuration()
        self._unsubscribe_source = self.configuration_source.on_configurations_changed(
            self._handle_preferences_update
        )
        logger.info(f"Build configuration manager ready ({len(self._active_configs)} roots restored)")

    def dispose(self) -> None:
        """Stop listening to configuration changes."""
        if self._unsubscribe_source is not None:
            self._unsubscribe_source()
            self._unsubscribe_source = None

    async def flush(self) -> None:
        """Wait for all issued snapshot writes.

        Raises:
            StorageError: If one of the writes failed
        """
        if self._pending_saves:
            await asyncio.gather(*self._pending_saves)

    # --- Persistence ---

    async def _load_active_configuration(self) -> None:
        """Load the active build configurations from persistent storage."""
        saved = await self.storage.get(ACTIVE_BUILD_CONFIGURATIONS_MAP_STORAGE_KEY)
        if saved is None:
            logger.debug("No persisted active build configurations")
            return
        try:
            snapshot = SavedActiveBuildConfigurations.model_validate(saved)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed active build configuration snapshot: {e}")
            return
        self._active_configs = snapshot.to_map()
        logger.info(f"Restored active build configurations for {len(self._active_configs)} roots")

    @staticmethod
    def _serialize(active: Mapping[str, BuildConfiguration | None]) -> dict:
        """Snapshot data for a map, in insertion order."""
        return SavedActiveBuildConfigurations.from_map(active).model_dump(mode="json")

    def _save_active_configuration(self, data: dict) -> asyncio.Task[None]:
        """Issue a write of already serialized snapshot data and return its task."""
        task = asyncio.get_running_loop().create_task(
            self.storage.set(ACTIVE_BUILD_CONFIGURATIONS_MAP_STORAGE_KEY, data)
        )
        self._pending_saves.add(task)
        task.add_done_callback(self._on_save_done)
        return task

    def _on_save_done(self, task: asyncio.Task[None]) -> None:
        self._pending_saves.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Failed to persist active build configurations: {error}")

    # --- Revalidation ---

    def _handle_preferences_update(self) -> None:
        """Clear active configurations that are no longer valid.

        The default root is cleared (and both streams fire) whenever its
        configuration is missing from the valid list, including when nothing
        is active. With ``revalidate_all_roots`` every root is checked against
        its own list, but roots without an active configuration are left alone.
        """
        if not self.revalidate_all_roots:
            active = self.get_active_config()
            if active is None or not self._is_defined(active):
                logger.info("Active build configuration is not defined, clearing it")
                self.set_active_config(None)
            return

        for root in self.workspace_roots.list_roots():
            active = self.get_active_config(root)
            if active is not None and not self._is_defined(active, root):
                logger.info(f"Active build configuration '{active.name}' is no longer defined for {root}, clearing it")
                self.set_active_config(None, root)

    def _is_defined(self, active: BuildConfiguration, root: str | None = None) -> bool:
        return any(config.same_as(active) for config in self.get_valid_configs(root))

    # --- Queries ---

    def _resolve_root(self, root: str | None) -> str | None:
        """Use the given root, else the first workspace root."""
        if root:
            return root
        roots = self.workspace_roots.list_roots()
        return roots[0] if roots else None

    def get_configs(self, root: str | None = None) -> list[BuildConfiguration]:
        """Get the list of defined build configurations.

        Args:
            root: Optional workspace root

        Returns:
            Configurations as defined, including invalid ones
        """
        return list(self.configuration_source.get_configurations(root))

    def get_valid_configs(self, root: str | None = None) -> list[BuildConfiguration]:
        """Get the defined build configurations that have a name and a directory.

        Args:
            root: Optional workspace root

        Returns:
            Valid configurations sorted by name, case-insensitively, using locale collation
        """
        valid = [config for config in self.get_configs(root) if config.is_valid()]
        return sorted(valid, key=lambda config: collation_key(config.name))

    def get_active_config(self, root: str | None = None) -> BuildConfiguration | None:
        """Get the active build configuration.

        Args:
            root: Optional workspace root, defaults to the first workspace root

        Returns:
            The active configuration, or None if unset or there are no roots
        """
        workspace_root = self._resolve_root(root)
        if workspace_root is None:
            return None
        return self._active_configs.get(workspace_root)

    def get_all_active_configs(self) -> Mapping[str, BuildConfiguration | None]:
        """Get the active build configurations for all roots.

        Returns:
            Read-only snapshot, including roots whose configuration was cleared
        """
        return MappingProxyType(dict(self._active_configs))

    # --- Updates ---

    def set_active_config(
        self, config: BuildConfiguration | None, root: str | None = None
    ) -> asyncio.Task[None] | None:
        """Set the active build configuration.

        Args:
            config: The configuration to activate, None to clear
            root: Optional workspace root, defaults to the first workspace root

        Returns:
            Task of the snapshot write, or None if there is no root to set
        """
        workspace_root = self._resolve_root(root)
        if workspace_root is None:
            logger.warning("Cannot set active build configuration: no workspace roots")
            return None

        updated = dict(self._active_configs)
        updated[workspace_root] = config
        # Serialize before committing so a failure leaves the map untouched
        data = self._serialize(updated)

        self._active_configs = updated
        save = self._save_active_configuration(data)

        active = {source: cpp_config for source, cpp_config in updated.items() if cpp_config is not None}
        logger.debug(f"Active build configuration for {workspace_root}: {config.name if config else None}")
        self._changes.fire(
            ActiveConfigChangeEvent(root=workspace_root, config=config, active_configs=MappingProxyType(active))
        )
        self._legacy_changes.fire(config)
        return save

    # --- Change streams ---

    def on_change(self, listener: Callable[[ActiveConfigChangeEvent], None]) -> Unsubscribe:
        """Listen to every active configuration change."""
        return self._changes.on(listener)

    def subscribe(self) -> asyncio.Queue[ActiveConfigChangeEvent]:
        """Queue receiving every active configuration change."""
        return self._changes.subscribe()

    def unsubscribe(self, queue: asyncio.Queue[ActiveConfigChangeEvent]) -> None:
        self._changes.unsubscribe(queue)

    def on_active_config_change(self, listener: Callable[[BuildConfiguration | None], None]) -> Unsubscribe:
        """Listen to the value just set for the resolved root.

        Called after all ``on_change``/``on_active_configs_change`` listeners
        of the same change, whatever the registration order.

        Deprecated: use ``on_active_configs_change`` for multi-root workspaces.
        """
        return self._legacy_changes.on(listener)

    def on_active_configs_change(
        self, listener: Callable[[Mapping[str, BuildConfiguration]], None]
    ) -> Unsubscribe:
        """Listen to the active configurations of all roots that have one."""
        return self._changes.map(lambda event: event.active_configs)(listener)

    # --- Compilation databases ---

    async def get_merged_compilation_database(self, directories: Sequence[str]) -> str:
        """Get a compile_commands.json merging the databases of directories.

        Args:
            directories: Build directories to merge

        Returns:
            Path to the merged compilation database
        """
        # TODO: cache the merge result keyed by directory list and database mtimes
        return await self.merger.merge(directories)
