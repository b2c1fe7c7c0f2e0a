"""Core data types and the error taxonomy shared by every Watch Sync module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

EntryId = NewType("EntryId", str)

# The empty id addresses the root directory of a backend.
ROOT_ID = EntryId("")


@dataclass(frozen=True)
class Metadata:
    """Attributes of a single file or directory as reported by a provider."""
    id: EntryId
    last_modified: int = 0  # ms since epoch
    is_directory: bool = False


# ---- errors ----


class WatchSyncError(Exception):
    """Base class for all Watch Sync errors."""


class ProviderError(WatchSyncError):
    """A metadata provider could not satisfy a request for *entry_id*."""

    reason = "provider error"

    def __init__(self, entry_id: EntryId | str, message: str = ""):
        self.entry_id = entry_id
        super().__init__(message or f"{self.reason}: {entry_id!r}")


class EntryNotFoundError(ProviderError):
    reason = "entry not found"


class EntryNotADirectoryError(ProviderError):
    reason = "entry is not a directory"


class EntryIsADirectoryError(ProviderError):
    reason = "entry is a directory"


class MonitorStateError(WatchSyncError):
    """A monitor control operation was called in the wrong lifecycle state."""


class NotStartedError(MonitorStateError):
    """The monitor has not been started, or has already been shut down."""
