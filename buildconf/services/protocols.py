"""Contracts between the build configuration manager and its collaborators.

The manager consumes a configuration source, a workspace root provider, a
key-value store and a compilation database merger. It produces the
``BuildConfigurationManager`` contract, extended by
``MultiRootBuildConfigurationManager`` for callers that handle several roots.
Both produced protocols are runtime checkable so callers can check for the
extension with ``isinstance``.
"""

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any
from typing import Protocol
from typing import runtime_checkable

from buildconf.emitter import Unsubscribe
from buildconf.models import BuildConfiguration


class ConfigurationSource(Protocol):
    """Supplies the raw build configuration list per workspace root."""

    ready: Awaitable[None]

    def get_configurations(self, root: str | None = None) -> Sequence[BuildConfiguration]: ...

    def on_configurations_changed(self, listener: Callable[[], None]) -> Unsubscribe: ...


class WorkspaceRootProvider(Protocol):
    """Lists workspace root URIs; the first one is the default root."""

    def list_roots(self) -> Sequence[str]: ...


class KeyValueStorage(Protocol):
    """Durable get/set by key."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...


class CompilationDatabaseMerger(Protocol):
    """Merges the compilation databases of several directories into one file."""

    async def merge(self, directories: Sequence[str]) -> str: ...


@runtime_checkable
class BuildConfigurationManager(Protocol):
    """List build configurations and get/set the active one."""

    ready: Awaitable[None]

    def get_configs(self, root: str | None = None) -> list[BuildConfiguration]: ...

    def get_valid_configs(self, root: str | None = None) -> list[BuildConfiguration]: ...

    def get_active_config(self, root: str | None = None) -> BuildConfiguration | None: ...

    def set_active_config(self, config: BuildConfiguration | None, root: str | None = None) -> Any: ...

    def on_active_config_change(
        self, listener: Callable[[BuildConfiguration | None], None]
    ) -> Unsubscribe: ...


@runtime_checkable
class MultiRootBuildConfigurationManager(BuildConfigurationManager, Protocol):
    """Multi-root extension of ``BuildConfigurationManager``."""

    def get_all_active_configs(self) -> Mapping[str, BuildConfiguration | None]: ...

    def on_active_configs_change(
        self, listener: Callable[[Mapping[str, BuildConfiguration]], None]
    ) -> Unsubscribe: ...

    async def get_merged_compilation_database(self, directories: Sequence[str]) -> str: ...
