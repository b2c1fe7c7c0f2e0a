"""
Versioned change cache for Watch Sync.

Remembers, per entry id, the modification timestamp at which the entry was
last copied and how many times a change has been recorded for it.  The
cache lives only in memory and grows monotonically: entries are added on
first observation and never removed.
"""

import threading
from dataclasses import dataclass
from typing import Protocol

from watch_sync.model import EntryId


class ChangeCache(Protocol):
    """Expected interface for the cache consulted by the monitor."""

    def get(self, entry_id: EntryId) -> tuple[int, int]:
        """Return ``(last_modified, version)``, initialising unseen ids to ``(0, 0)``."""
        ...

    def update(self, entry_id: EntryId, last_modified: int) -> int:
        """Record a change at *last_modified* and return the new version."""
        ...

    def get_all_keys(self) -> list[EntryId]:
        """Return every id ever observed, in no particular order."""
        ...


@dataclass
class CacheEntry:
    """Change history of a single entry."""
    id: EntryId
    last_modified: int = 0
    version: int = 0


class HistoryCache:
    """
    Thread-safe in-memory implementation of :class:`ChangeCache`.

    ``get`` is a lazily-initialising read: the first call for an id creates
    an entry at ``(0, 0)``, so any positive timestamp counts as a change.
    ``update`` bumps the version on every call; callers decide whether a
    change happened.  :meth:`check_and_update` performs the compare and the
    bump under one lock for callers that share the cache between threads.
    """

    def __init__(self) -> None:
        self._history: dict[EntryId, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, entry_id: EntryId) -> tuple[int, int]:
        with self._lock:
            entry = self._entry(entry_id)
            return entry.last_modified, entry.version

    def update(self, entry_id: EntryId, last_modified: int) -> int:
        with self._lock:
            return self._bump(entry_id, last_modified)

    def check_and_update(self, entry_id: EntryId, last_modified: int) -> int | None:
        """
        Bump *entry_id* only if *last_modified* is newer than the cached value.

        Returns the new version, or None when the entry is unchanged.
        """
        with self._lock:
            if self._entry(entry_id).last_modified >= last_modified:
                return None
            return self._bump(entry_id, last_modified)

    def get_all_keys(self) -> list[EntryId]:
        with self._lock:
            return list(self._history)

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    def __contains__(self, entry_id: object) -> bool:
        with self._lock:
            return entry_id in self._history

    # ---- internals (lock held) ----

    def _entry(self, entry_id: EntryId) -> CacheEntry:
        entry = self._history.get(entry_id)
        if entry is None:
            entry = self._history[entry_id] = CacheEntry(id=entry_id)
        return entry

    def _bump(self, entry_id: EntryId, last_modified: int) -> int:
        entry = self._history.get(entry_id)
        if entry is None:
            entry = self._history[entry_id] = CacheEntry(
                id=entry_id, last_modified=last_modified, version=1
            )
            return entry.version
        entry.last_modified = last_modified
        entry.version += 1
        return entry.version
