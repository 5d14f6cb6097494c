"""
Shared pytest fixtures for buildconf test suite.

Provides fixtures for:
- Temporary storage directories
- In-memory collaborators for the build configuration manager
- Sample build configurations
"""

import asyncio
import tempfile
from collections.abc import Callable
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from buildconf.emitter import Emitter
from buildconf.emitter import Unsubscribe
from buildconf.models import BuildConfiguration
from buildconf.services import BuildConfigurationManagerImpl
from buildconf.services import StaticWorkspaceRoots

ROOT_A = "file:///ws/a"
ROOT_B = "file:///ws/b"


class FakeConfigurationSource:
    """Configuration source holding lists in memory."""

    def __init__(self) -> None:
        self.configs: dict[str | None, list[BuildConfiguration]] = {None: []}
        self._changed: Emitter[None] = Emitter()
        self._loaded = asyncio.Event()
        self._loaded.set()

    @property
    def ready(self):
        return self._loaded.wait()

    def get_configurations(self, root: str | None = None) -> list[BuildConfiguration]:
        if root and root in self.configs:
            return list(self.configs[root])
        return list(self.configs[None])

    def on_configurations_changed(self, listener: Callable[[], None]) -> Unsubscribe:
        return self._changed.on(lambda _: listener())

    def update(self, configs: list[BuildConfiguration], root: str | None = None) -> None:
        """Replace a list and notify listeners."""
        self.configs[root] = configs
        self._changed.fire(None)


class MemoryStorage:
    """Key-value storage keeping values in a dict."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = value


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary storage directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_storage_env(temp_storage_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point BUILDCONF_HOME at a temp directory.

    Also clears BUILDCONF_ overrides so the host environment cannot leak in.
    """
    for var in (
        "BUILDCONF_CONFIG_DIR",
        "BUILDCONF_STATE_DIR",
        "BUILDCONF_CACHE_DIR",
        "BUILDCONF_LOG_LEVEL",
        "BUILDCONF_WORKSPACE_ROOTS",
        "BUILDCONF_REVALIDATE_ALL_ROOTS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("BUILDCONF_HOME", str(temp_storage_dir))
    return temp_storage_dir


@pytest.fixture
def source() -> FakeConfigurationSource:
    return FakeConfigurationSource()


@pytest.fixture
def roots() -> StaticWorkspaceRoots:
    return StaticWorkspaceRoots([ROOT_A, ROOT_B])


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def merger() -> AsyncMock:
    merger = AsyncMock()
    merger.merge.return_value = "/tmp/merged/compile_commands.json"
    return merger


@pytest.fixture
def manager(
    source: FakeConfigurationSource,
    roots: StaticWorkspaceRoots,
    storage: MemoryStorage,
    merger: AsyncMock,
) -> BuildConfigurationManagerImpl:
    """Build configuration manager wired to in-memory collaborators."""
    return BuildConfigurationManagerImpl(
        configuration_source=source,
        workspace_roots=roots,
        storage=storage,
        merger=merger,
    )


@pytest.fixture
def debug_config() -> BuildConfiguration:
    return BuildConfiguration(name="debug", directory="/ws/a/build/debug", commands={"build": "make"})


@pytest.fixture
def release_config() -> BuildConfiguration:
    return BuildConfiguration(name="release", directory="/ws/a/build/release")
