"""Post-run watch log: what was seen, how it was reached and what was copied."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from watch_sync.cache import ChangeCache
from watch_sync.model import EntryId, ProviderError
from watch_sync.provider import MetadataProvider

logger = logging.getLogger(__name__)

EXPLICIT = "explicit"
IMPLICIT = "implicit"
COPIED = "copied"
NOT_COPIED = "not copied"


@dataclass(frozen=True)
class WatchLogEntry:
    id: EntryId
    watch_type: str
    version: int

    @property
    def status(self) -> str:
        return COPIED if self.version > 0 else NOT_COPIED


def build_watch_log(
    cache: ChangeCache,
    watchlist: Iterable[EntryId],
    provider: MetadataProvider,
) -> list[WatchLogEntry]:
    """
    Summarise the cache after a run.

    Every cached id is reported as *explicit* if it is in the watchlist and
    *implicit* if it was reached by expanding a directory.  Explicit files
    the monitor never observed (for example because they vanished) are
    appended with version 0.  Explicit directories are not files and are
    left out.
    """
    remaining = set(watchlist)
    entries = []
    for key in sorted(cache.get_all_keys()):
        _, version = cache.get(key)
        watch_type = EXPLICIT if key in remaining else IMPLICIT
        entries.append(WatchLogEntry(id=key, watch_type=watch_type, version=version))
        remaining.discard(key)

    for key in sorted(remaining):
        try:
            if provider.retrieve_metadata(key).is_directory:
                continue
        except ProviderError as exc:
            logger.debug("Watched entry %r unavailable: %s", key, exc)
        entries.append(WatchLogEntry(id=key, watch_type=EXPLICIT, version=0))
    return entries


def log_watch_log(entries: Iterable[WatchLogEntry]) -> None:
    logger.info("Watch log:")
    for entry in entries:
        logger.info(
            "File: %s   watchtype: %s  version: %d   status: %s",
            entry.id,
            entry.watch_type,
            entry.version,
            entry.status,
        )
