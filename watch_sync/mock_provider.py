"""
In-memory simulated storage backend.

Implements :class:`~watch_sync.provider.MetadataProvider` over a tree held
in dictionaries.  Used by the simulation driver, the fixture loader and
the tests.  Copies are not performed; each request is logged and recorded
in :attr:`InMemoryProvider.copies` so callers can inspect what the monitor
asked for.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass

from watch_sync.model import (
    ROOT_ID,
    EntryId,
    EntryIsADirectoryError,
    EntryNotADirectoryError,
    EntryNotFoundError,
    Metadata,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


@dataclass
class _Entry:
    id: EntryId
    last_modified: int
    is_directory: bool
    parent_id: EntryId

    def metadata(self) -> Metadata:
        return Metadata(id=self.id, last_modified=self.last_modified, is_directory=self.is_directory)


class InMemoryProvider:
    """
    Thread-safe simulated backend.

    Build a tree explicitly with :meth:`add_directory` / :meth:`add_file`,
    or generate a random one with :meth:`random`.  The root directory (the
    empty id) always exists and is not itself an entry.
    """

    def __init__(self) -> None:
        self._entries: dict[EntryId, _Entry] = {}
        self._children: dict[EntryId, list[EntryId]] = {ROOT_ID: []}
        self.copies: list[tuple[EntryId, int]] = []
        self._lock = threading.RLock()

    @classmethod
    def random(
        cls,
        file_count: int,
        directory_count: int,
        rng: random.Random | None = None,
    ) -> InMemoryProvider:
        """
        Create a provider with a randomly shaped tree.

        The first two directories stay at the root and every later one is
        nested under a random earlier directory.  The first tenth of the
        files stay at the root; the rest land in a random directory.
        """
        rng = rng or random.Random()
        fp = cls()
        directories = [EntryId(f"directory{i + 1}") for i in range(directory_count)]
        parents: dict[EntryId, EntryId] = {d: ROOT_ID for d in directories}
        for i in range(2, directory_count):
            parents[directories[i]] = directories[rng.randrange(i)]

        # Parents must exist before children, which index order guarantees.
        for d in directories:
            fp.add_directory(d, parents[d])

        for i in range(file_count):
            parent = ROOT_ID
            if directories and i >= file_count // 10:
                parent = rng.choice(directories)
            fp.add_file(EntryId(f"file{i + 1}"), parent)
        return fp

    # ---- tree construction ----

    def add_file(
        self,
        entry_id: EntryId | str,
        parent_id: EntryId | str = ROOT_ID,
        last_modified: int | None = None,
    ) -> None:
        """Add a file under directory *parent_id*."""
        self._add(EntryId(entry_id), EntryId(parent_id), False, last_modified)

    def add_directory(
        self,
        entry_id: EntryId | str,
        parent_id: EntryId | str = ROOT_ID,
        last_modified: int | None = None,
    ) -> None:
        """Add an empty directory under directory *parent_id*."""
        self._add(EntryId(entry_id), EntryId(parent_id), True, last_modified)

    def _add(
        self,
        entry_id: EntryId,
        parent_id: EntryId,
        is_directory: bool,
        last_modified: int | None,
    ) -> None:
        if entry_id == ROOT_ID:
            raise ValueError("the empty id is reserved for the root directory")
        with self._lock:
            if entry_id in self._entries:
                raise ValueError(f"duplicate entry id: {entry_id!r}")
            if parent_id not in self._children:
                if parent_id in self._entries:
                    raise EntryNotADirectoryError(parent_id)
                raise EntryNotFoundError(parent_id)
            self._entries[entry_id] = _Entry(
                id=entry_id,
                last_modified=now_ms() if last_modified is None else last_modified,
                is_directory=is_directory,
                parent_id=parent_id,
            )
            if is_directory:
                self._children[entry_id] = []
            self._children[parent_id].append(entry_id)

    # ---- simulated updates ----

    def set_last_modified(self, entry_id: EntryId | str, last_modified: int) -> None:
        with self._lock:
            self._require(EntryId(entry_id)).last_modified = last_modified

    def touch(self, entry_id: EntryId | str) -> int:
        """
        Mark *entry_id* as modified now and return its new timestamp.

        The new timestamp is always strictly greater than the previous one,
        even when two touches land in the same millisecond.
        """
        with self._lock:
            entry = self._require(EntryId(entry_id))
            entry.last_modified = max(now_ms(), entry.last_modified + 1)
            return entry.last_modified

    def touch_any(self, rng: random.Random | None = None) -> EntryId:
        """Touch a random entry and return its id."""
        rng = rng or random.Random()
        with self._lock:
            if not self._entries:
                raise EntryNotFoundError(ROOT_ID, "provider has no entries")
            entry_id = rng.choice(list(self._entries))
            self.touch(entry_id)
            return entry_id

    def create_watchlist(self, count: int, rng: random.Random | None = None) -> list[EntryId]:
        """Pick *count* distinct random entries (files or directories)."""
        rng = rng or random.Random()
        with self._lock:
            ids = list(self._entries)
        return rng.sample(ids, min(count, len(ids)))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        with self._lock:
            return entry_id in self._entries

    # ---- MetadataProvider ----

    def retrieve_metadata(self, entry_id: EntryId) -> Metadata:
        if entry_id == ROOT_ID:
            return Metadata(id=ROOT_ID, is_directory=True)
        with self._lock:
            return self._require(entry_id).metadata()

    def get_children(self, entry_id: EntryId) -> list[Metadata]:
        with self._lock:
            child_ids = self._children.get(entry_id)
            if child_ids is None:
                self._require(entry_id)
                raise EntryNotADirectoryError(entry_id)
            return [self._entries[c].metadata() for c in child_ids]

    def copy_file(self, entry_id: EntryId, version: int) -> None:
        if entry_id == ROOT_ID:
            raise EntryIsADirectoryError(entry_id)
        with self._lock:
            if self._require(entry_id).is_directory:
                raise EntryIsADirectoryError(entry_id)
            self.copies.append((entry_id, version))
        logger.info("Copying file %s version %d", entry_id, version)

    def _require(self, entry_id: EntryId) -> _Entry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry
