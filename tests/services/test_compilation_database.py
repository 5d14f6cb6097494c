"""Tests for merging compile_commands.json files."""

import json
from pathlib import Path

import pytest

from buildconf.exceptions import CompilationDatabaseError
from buildconf.services import CompileCommandsMerger


def write_database(directory: Path, files: list[str]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    entries = [{"directory": str(directory), "file": name, "command": f"cc -c {name}"} for name in files]
    (directory / "compile_commands.json").write_text(json.dumps(entries))


@pytest.fixture
def merger(tmp_path: Path) -> CompileCommandsMerger:
    return CompileCommandsMerger(tmp_path / "merged")


class TestMerge:
    """Test compile_commands.json merging."""

    async def test_concatenates_in_directory_order(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        write_database(tmp_path / "app", ["main.c"])
        write_database(tmp_path / "lib", ["util.c", "io.c"])

        path = await merger.merge([str(tmp_path / "app"), str(tmp_path / "lib")])

        entries = json.loads(Path(path).read_text())
        assert [entry["file"] for entry in entries] == ["main.c", "util.c", "io.c"]
        assert Path(path).name == "compile_commands.json"
        assert Path(path).is_relative_to(tmp_path / "merged")

    async def test_duplicate_directories_merged_once(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        write_database(tmp_path / "app", ["main.c"])

        path = await merger.merge([str(tmp_path / "app"), str(tmp_path / "app")])

        assert len(json.loads(Path(path).read_text())) == 1

    async def test_missing_database_skipped(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        write_database(tmp_path / "app", ["main.c"])

        path = await merger.merge([str(tmp_path / "app"), str(tmp_path / "not-built")])

        assert len(json.loads(Path(path).read_text())) == 1

    async def test_same_directories_same_output(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        write_database(tmp_path / "app", ["main.c"])

        first = await merger.merge([str(tmp_path / "app")])
        second = await merger.merge([str(tmp_path / "app")])

        assert first == second

    async def test_recomputes_on_every_call(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        write_database(tmp_path / "app", ["main.c"])
        await merger.merge([str(tmp_path / "app")])

        write_database(tmp_path / "app", ["main.c", "extra.c"])
        path = await merger.merge([str(tmp_path / "app")])

        assert len(json.loads(Path(path).read_text())) == 2

    async def test_malformed_database_raises(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / "compile_commands.json").write_text("{not json")

        with pytest.raises(CompilationDatabaseError):
            await merger.merge([str(tmp_path / "app")])

    async def test_non_array_database_raises(self, merger: CompileCommandsMerger, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / "compile_commands.json").write_text('{"file": "main.c"}')

        with pytest.raises(CompilationDatabaseError, match="not a JSON array"):
            await merger.merge([str(tmp_path / "app")])

    def test_default_output_dir(self, mock_storage_env: Path) -> None:
        merger = CompileCommandsMerger()

        assert merger.output_dir == mock_storage_env / "cache" / "compile-commands"
