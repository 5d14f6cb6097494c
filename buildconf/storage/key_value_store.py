"""JSON-backed durable key-value store.

Stores every key in a single JSON document so that each ``set`` replaces one
record atomically.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from buildconf.exceptions import StorageError

from .paths import get_state_dir

logger = logging.getLogger(__name__)


class JsonKeyValueStore:
    """Key-value store persisted to one JSON file.

    Blocking file access runs in a worker thread. Writes are serialized with
    an asyncio lock so two concurrent ``set`` calls never interleave their
    read-modify-write of the document.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize key-value store.

        Args:
            path: JSON file to use. Defaults to $BUILDCONF_HOME/state/storage.json
        """
        self.path = path or (get_state_dir() / "storage.json")
        self._lock = asyncio.Lock()
        logger.info(f"Initialized key-value store at {self.path}")

    async def get(self, key: str) -> Any | None:
        """Get value stored under key.

        Args:
            key: Storage key

        Returns:
            Stored value, or None if the key was never set
        """
        data = await asyncio.to_thread(self._load_document)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Store value under key.

        Args:
            key: Storage key
            value: JSON-serializable value

        Raises:
            StorageError: If the document could not be written
        """
        async with self._lock:
            await asyncio.to_thread(self._update_document, key, value)

    def _update_document(self, key: str, value: Any) -> None:
        data = self._load_document()
        data[key] = value
        self._save_document(data)

    def _load_document(self) -> dict[str, Any]:
        """Load the JSON document or return an empty one.

        A missing or unreadable document is treated as empty.
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load storage from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage at {self.path}: expected a JSON object")
            return {}
        return data

    def _save_document(self, data: dict[str, Any]) -> None:
        """Save document atomically.

        Args:
            data: Full document to write
        """
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.path)
            logger.debug(f"Saved storage to {self.path}")
        except (OSError, TypeError, ValueError) as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to save storage to {self.path}: {e}") from e
