"""End-to-end tests for the file-backed registry."""

import json
from pathlib import Path

import pytest

from buildconf import MultiRootBuildConfigurationManager
from buildconf import start_registry
from buildconf.config import RegistrySettings

PREFERENCES = """
cpp.buildConfigurations:
  - name: release
    directory: {release}
  - name: debug
    directory: {debug}
  - name: ""
    directory: /ignored
"""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    for name in ("debug", "release"):
        build_dir = root / "build" / name
        build_dir.mkdir(parents=True)
        (build_dir / "compile_commands.json").write_text(
            json.dumps([{"directory": str(build_dir), "file": f"{name}.c", "command": "cc"}])
        )
    return root


@pytest.fixture
def settings(tmp_path: Path, workspace: Path, mock_storage_env: Path) -> RegistrySettings:
    preferences = tmp_path / "preferences.yaml"
    preferences.write_text(
        PREFERENCES.format(release=workspace / "build" / "release", debug=workspace / "build" / "debug")
    )
    return RegistrySettings(
        workspace_roots=[str(workspace)],
        preferences_file=preferences,
        storage_file=tmp_path / "storage.json",
        merged_database_dir=tmp_path / "merged",
    )


class TestRegistry:
    """Test the registry wired to real files."""

    async def test_selection_survives_restart(self, settings: RegistrySettings) -> None:
        manager, _ = await start_registry(settings)
        valid = manager.get_valid_configs()
        assert [config.name for config in valid] == ["debug", "release"]

        await manager.set_active_config(valid[0])
        manager.dispose()

        restarted, _ = await start_registry(settings)
        assert restarted.get_active_config() == valid[0]

    async def test_preference_change_clears_selection(self, settings: RegistrySettings) -> None:
        manager, source = await start_registry(settings)
        manager.set_active_config(manager.get_valid_configs()[0])

        settings.preferences_file.write_text("cpp.buildConfigurations: []\n")
        await source.reload()
        await manager.flush()

        assert manager.get_active_config() is None
        saved = json.loads(settings.storage_file.read_text())
        assert list(saved.values()) == [{"configs": [[settings.workspace_roots[0], None]]}]

    async def test_merged_database(self, settings: RegistrySettings, workspace: Path) -> None:
        manager, _ = await start_registry(settings)
        assert isinstance(manager, MultiRootBuildConfigurationManager)

        directories = [config.directory for config in manager.get_valid_configs()]
        path = await manager.get_merged_compilation_database(directories)

        entries = json.loads(Path(path).read_text())
        assert [entry["file"] for entry in entries] == ["debug.c", "release.c"]
