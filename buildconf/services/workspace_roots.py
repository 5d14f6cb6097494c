"""Workspace root provider backed by a plain list."""

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class StaticWorkspaceRoots:
    """Ordered workspace root URIs; the first one is the default root."""

    def __init__(self, roots: Iterable[str] = ()) -> None:
        self._roots: list[str] = list(roots)

    def list_roots(self) -> list[str]:
        return list(self._roots)

    def add_root(self, root: str) -> None:
        """Append a root unless it is already known."""
        if root not in self._roots:
            self._roots.append(root)
            logger.info(f"Added workspace root {root}")

    def remove_root(self, root: str) -> None:
        if root in self._roots:
            self._roots.remove(root)
            logger.info(f"Removed workspace root {root}")
