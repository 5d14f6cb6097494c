"""Preference-backed source of build configurations.

Build configurations live under the ``cpp.buildConfigurations`` key of YAML
preference files. The user-scope file applies to every root; a folder-scope
file at ``<root>/.buildconf/preferences.yaml`` overrides it for that root.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import yaml
from pydantic import ValidationError

from buildconf.emitter import Emitter
from buildconf.emitter import Unsubscribe
from buildconf.models import BuildConfiguration
from buildconf.models import BuildConfigurationEntry
from buildconf.storage.paths import get_config_dir

from .protocols import WorkspaceRootProvider

logger = logging.getLogger(__name__)

CPP_BUILD_CONFIGURATIONS_PREFERENCE_KEY = "cpp.buildConfigurations"
FOLDER_PREFERENCES_PATH = Path(".buildconf") / "preferences.yaml"

_MISSING = object()


def root_to_path(root: str) -> Path | None:
    """Convert a file:// root URI to a local path.

    Args:
        root: Workspace root URI

    Returns:
        Local path, or None for non-file URIs
    """
    parsed = urlparse(root)
    if parsed.scheme != "file":
        return None
    return Path(url2pathname(parsed.path))


class PreferenceConfigurationSource:
    """Reads build configurations from user and folder preference files.

    Configuration objects are parsed once per load, so repeated calls to
    ``get_configurations`` hand out the same instances until the next
    ``reload``. Folder files of the roots listed by ``workspace_roots`` are
    read during ``load``/``reload``; other roots are read on first use.
    """

    def __init__(
        self,
        preferences_file: Path | None = None,
        workspace_roots: WorkspaceRootProvider | None = None,
    ) -> None:
        """Initialize configuration source.

        Args:
            preferences_file: User-scope preferences. Defaults to
                $BUILDCONF_HOME/config/preferences.yaml
            workspace_roots: Roots whose folder preferences are read up front
        """
        self.preferences_file = preferences_file or (get_config_dir() / "preferences.yaml")
        self.workspace_roots = workspace_roots
        self._user_raw: Any = None
        self._user_configs: list[BuildConfiguration] = []
        # root -> (raw preference value or _MISSING, parsed configs)
        self._folder_cache: dict[str, tuple[Any, list[BuildConfiguration]]] = {}
        self._changed: Emitter[None] = Emitter()
        self._loaded = asyncio.Event()

    @property
    def ready(self):
        """Awaitable completed once the first ``load`` has finished."""
        return self._loaded.wait()

    async def load(self) -> None:
        """Read the user-scope preferences and mark the source ready."""
        self._user_raw = await asyncio.to_thread(self._read_preference, self.preferences_file)
        self._user_configs = self._parse(self._user_raw, self.preferences_file)
        self._folder_cache.clear()
        for root in self._listed_roots():
            self._folder_cache[root] = await self._read_folder(root)
        logger.info(f"Loaded {len(self._user_configs)} build configurations from {self.preferences_file}")
        self._loaded.set()

    async def reload(self) -> bool:
        """Re-read the user file and the folder files of known and listed roots.

        Returns:
            True if any preference value changed (listeners were notified)
        """
        user_raw = await asyncio.to_thread(self._read_preference, self.preferences_file)
        changed = user_raw != self._user_raw
        if changed:
            self._user_raw = user_raw
            self._user_configs = self._parse(user_raw, self.preferences_file)

        roots = dict.fromkeys([*self._folder_cache, *self._listed_roots()])
        for root in roots:
            old_raw = self._folder_cache[root][0] if root in self._folder_cache else _MISSING
            raw, configs = await self._read_folder(root)
            if root not in self._folder_cache or raw != old_raw:
                changed = changed or raw != old_raw
                self._folder_cache[root] = (raw, configs)

        if changed:
            logger.info("Build configuration preferences changed")
            self._changed.fire(None)
        else:
            logger.debug("Build configuration preferences unchanged")
        return changed

    def get_configurations(self, root: str | None = None) -> list[BuildConfiguration]:
        """Get the raw configuration list.

        Args:
            root: Optional workspace root; folder preferences override user
                preferences for that root

        Returns:
            Configurations in preference order (may contain invalid entries)
        """
        if root:
            raw, configs = self._folder_preferences(root)
            if raw is not _MISSING:
                return list(configs)
        return list(self._user_configs)

    def on_configurations_changed(self, listener: Callable[[], None]) -> Unsubscribe:
        """Register a listener called after preferences changed."""
        return self._changed.on(lambda _: listener())

    def _listed_roots(self) -> list[str]:
        return list(self.workspace_roots.list_roots()) if self.workspace_roots is not None else []

    async def _read_folder(self, root: str) -> tuple[Any, list[BuildConfiguration]]:
        folder_file = self._folder_file(root)
        raw = await asyncio.to_thread(self._read_preference, folder_file) if folder_file else _MISSING
        return raw, self._parse(raw, folder_file)

    def _folder_preferences(self, root: str) -> tuple[Any, list[BuildConfiguration]]:
        # Roots outside the listed workspace roots are read synchronously once
        if root not in self._folder_cache:
            folder_file = self._folder_file(root)
            raw = self._read_preference(folder_file) if folder_file else _MISSING
            self._folder_cache[root] = (raw, self._parse(raw, folder_file))
        return self._folder_cache[root]

    @staticmethod
    def _folder_file(root: str) -> Path | None:
        root_path = root_to_path(root)
        return root_path / FOLDER_PREFERENCES_PATH if root_path is not None else None

    @staticmethod
    def _read_preference(path: Path) -> Any:
        """Read the build configurations key from a preferences file.

        Returns:
            The raw preference value, or _MISSING when the file or key is absent
        """
        if not path.exists():
            return _MISSING
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load preferences from {path}: {e}")
            return _MISSING
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences at {path}: expected a mapping")
            return _MISSING
        return data.get(CPP_BUILD_CONFIGURATIONS_PREFERENCE_KEY, _MISSING)

    @staticmethod
    def _parse(raw: Any, path: Path | None) -> list[BuildConfiguration]:
        if raw is _MISSING or raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"{CPP_BUILD_CONFIGURATIONS_PREFERENCE_KEY} in {path} is not a list")
            return []

        configs = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                logger.warning(f"Skipping build configuration #{index} in {path}: not a mapping")
                continue
            try:
                entry = BuildConfigurationEntry.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping build configuration #{index} in {path}: {e}")
                continue
            configs.append(entry.to_configuration())
        return configs
