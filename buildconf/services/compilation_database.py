"""Merging of compile_commands.json files.

Language servers such as clangd accept a single compilation database. To get
diagnostics and cross references for several build directories at once, the
databases of all directories are concatenated into one file.
"""

import asyncio
import hashlib
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from buildconf.exceptions import CompilationDatabaseError
from buildconf.storage.paths import get_merged_databases_dir

logger = logging.getLogger(__name__)

COMPILE_COMMANDS_FILE = "compile_commands.json"


class CompileCommandsMerger:
    """Writes the union of several compilation databases to one file.

    Example:
        >>> merger = CompileCommandsMerger(Path("/tmp/merged"))
        >>> path = await merger.merge(["/ws/build/debug", "/ws/lib/build"])
        >>> Path(path).name
        'compile_commands.json'
    """

    def __init__(self, output_dir: Path | None = None) -> None:
        """Initialize merger.

        Args:
            output_dir: Where merged databases are written. Defaults to
                $BUILDCONF_HOME/cache/compile-commands
        """
        self.output_dir = output_dir or get_merged_databases_dir()

    async def merge(self, directories: Sequence[str]) -> str:
        """Merge the compilation databases found in directories.

        Duplicate directories are merged once, in first-seen order.
        Directories without a compile_commands.json are skipped.

        Args:
            directories: Build directories

        Returns:
            Path to the merged compile_commands.json

        Raises:
            CompilationDatabaseError: If a database is malformed or the result
                cannot be written
        """
        unique = list(dict.fromkeys(directories))
        return await asyncio.to_thread(self._merge, unique)

    def _merge(self, directories: list[str]) -> str:
        entries: list[dict] = []
        for directory in directories:
            entries.extend(self._read_database(Path(directory) / COMPILE_COMMANDS_FILE))

        target = self.output_dir / self._merge_id(directories) / COMPILE_COMMANDS_FILE
        self._write_database(target, entries)
        logger.info(f"Merged {len(entries)} compile commands from {len(directories)} directories into {target}")
        return str(target)

    @staticmethod
    def _merge_id(directories: list[str]) -> str:
        """Stable identifier for a directory list."""
        return hashlib.sha256("\n".join(directories).encode("utf-8")).hexdigest()[:16]

    @staticmethod
    def _read_database(path: Path) -> list[dict]:
        if not path.exists():
            logger.warning(f"No compilation database at {path}, skipping")
            return []
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CompilationDatabaseError(f"Failed to read compilation database {path}: {e}") from e
        if not isinstance(data, list):
            raise CompilationDatabaseError(f"Compilation database {path} is not a JSON array")
        return data

    @staticmethod
    def _write_database(path: Path, entries: list[dict]) -> None:
        temp_path = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            temp_path.replace(path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise CompilationDatabaseError(f"Failed to write merged compilation database {path}: {e}") from e
