"""Exceptions raised at the boundaries of buildconf.

Only collaborators that touch the filesystem raise; the registry itself
represents missing roots and configurations as None.
"""


class BuildConfError(Exception):
    """Base class for buildconf errors."""


class StorageError(BuildConfError):
    """Durable key-value storage could not be read or written."""


class CompilationDatabaseError(BuildConfError):
    """A compilation database could not be read or the merge result written."""
