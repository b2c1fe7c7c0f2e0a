"""Capability interface the monitor needs from a storage backend.

Any object with these three methods can be monitored: the in-memory
simulation in :mod:`watch_sync.mock_provider`, a network store client, or
a test double.  Failures are reported by raising a
:class:`~watch_sync.model.ProviderError` subclass.
"""

from typing import Protocol

from watch_sync.model import EntryId, Metadata


class MetadataProvider(Protocol):
    """Expected interface for a hierarchical storage backend."""

    def retrieve_metadata(self, entry_id: EntryId) -> Metadata:
        """Return the metadata of *entry_id*.

        Raises EntryNotFoundError if no such entry exists.
        """
        ...

    def get_children(self, entry_id: EntryId) -> list[Metadata]:
        """Return metadata for every direct child of directory *entry_id*.

        The empty id denotes the root directory.  Raises EntryNotFoundError
        for an unknown id and EntryNotADirectoryError for a file.
        """
        ...

    def copy_file(self, entry_id: EntryId, version: int) -> None:
        """Replicate the current content of *entry_id*, tagged with *version*.

        Raises EntryIsADirectoryError for a directory and
        EntryNotFoundError for an unknown id.
        """
        ...
