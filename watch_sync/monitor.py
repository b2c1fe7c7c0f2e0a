"""Watchlist monitor for Watch Sync.

Expands a fixed watchlist into the live directory tree on every
evaluation cycle and streams the metadata of each discovered file into a
bounded queue.  A single consumer thread drains the queue, compares each
file against the change cache and asks the provider to copy the files
whose modification time moved forward, tagged with a new version number.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

from watch_sync import stats as counters
from watch_sync.cache import ChangeCache
from watch_sync.model import (
    EntryId,
    Metadata,
    MonitorStateError,
    NotStartedError,
    ProviderError,
)
from watch_sync.provider import MetadataProvider
from watch_sync.stats import StatsCollector

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_CAPACITY = 100

# Pushed onto the dispatch queue to tell the consumer to exit.
_CLOSE = object()


class MonitorState(enum.Enum):
    CREATED = "created"
    STARTED = "started"
    SHUT_DOWN = "shut down"


@dataclass
class CycleSummary:
    """Counts gathered during one evaluation cycle."""
    visited: int = 0
    directories_expanded: int = 0
    files_dispatched: int = 0
    errors: int = 0


class Monitor:
    """
    Periodically re-evaluates a watchlist and copies changed files.

    Usage:
        monitor = Monitor(provider, ["dir1", "file7"], HistoryCache())
        monitor.start()
        monitor.evaluate_watchlist()   # once per polling interval
        ...
        monitor.shut_down()

    Directories in the watchlist are walked recursively.  Subdirectories
    that are themselves in the watchlist are skipped when reached from a
    parent, since they are already expanded on their own.  The cache is
    only touched from the consumer thread, so change decisions are applied
    in exactly the order files were discovered.

    The consumer uses a separate ``get`` then ``update`` on the cache,
    which is safe only with one consumer.  Code that shares a cache
    between several consumers should call
    :meth:`HistoryCache.check_and_update` instead, which compares and
    bumps under one lock.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        watchlist: Iterable[EntryId],
        cache: ChangeCache,
        stats: StatsCollector | None = None,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
    ):
        if queue_capacity < 1:
            raise ValueError("queue_capacity must be >= 1")
        self._provider = provider
        self._watchlist = frozenset(watchlist)
        self._cache = cache
        self.stats = stats if stats is not None else StatsCollector()
        self._queue_capacity = queue_capacity
        self._queue: queue.Queue | None = None
        self._thread: threading.Thread | None = None
        self._state = MonitorState.CREATED
        self._state_lock = threading.Lock()
        # Held for the whole of a cycle so shut_down never closes the
        # queue while a producer is still feeding it.
        self._cycle_lock = threading.Lock()

    @property
    def watchlist(self) -> frozenset[EntryId]:
        return self._watchlist

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Return whether the consumer thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    # ---- lifecycle ----

    def start(self) -> None:
        """Create the dispatch queue and launch the consumer thread."""
        with self._state_lock:
            if self._state is not MonitorState.CREATED:
                raise MonitorStateError(f"cannot start a monitor that is {self._state.value}")
            dispatch: queue.Queue = queue.Queue(maxsize=self._queue_capacity)
            self._queue = dispatch
            self._thread = threading.Thread(
                target=self._consume, args=(dispatch,), daemon=True, name="MonitorConsumer"
            )
            self._state = MonitorState.STARTED
        self._thread.start()
        logger.info(
            "Monitor started (%d watchlist entries, queue capacity %d)",
            len(self._watchlist),
            self._queue_capacity,
        )

    def shut_down(self, timeout: float | None = None) -> None:
        """
        Close the dispatch queue and wait for the consumer to drain it.

        Every file already queued is still evaluated (and copied if changed)
        before the consumer exits.  Later calls to :meth:`evaluate_watchlist`
        raise NotStartedError.
        """
        with self._cycle_lock, self._state_lock:
            dispatch, thread = self._queue, self._thread
            if self._state is not MonitorState.STARTED or dispatch is None or thread is None:
                raise NotStartedError(f"monitor is {self._state.value}")
            self._queue = None
            self._state = MonitorState.SHUT_DOWN
        dispatch.put(_CLOSE)
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Monitor consumer still draining after %.1fs", timeout)
        else:
            logger.info("Monitor shut down.")

    def wait_idle(self) -> None:
        """Block until every file dispatched so far has been evaluated."""
        dispatch = self._queue
        if dispatch is None:
            raise NotStartedError(f"monitor is {self._state.value}")
        dispatch.join()

    # ---- evaluation ----

    def evaluate_watchlist(self) -> CycleSummary:
        """
        Walk the tree reachable from the watchlist once, breadth first.

        File metadata is handed to the consumer thread; this call returns
        as soon as the walk is done, without waiting for copies.  It blocks
        only while the dispatch queue is full.  Provider errors are logged
        and skip the offending entry; the rest of the tree is still walked.
        """
        with self._cycle_lock:
            dispatch = self._queue
            if dispatch is None:
                raise NotStartedError(f"monitor is {self._state.value}")

            summary = CycleSummary()
            pending: deque[EntryId] = deque(sorted(self._watchlist))

            while pending:
                entry_id = pending.popleft()
                summary.visited += 1

                try:
                    metadata = self._provider.retrieve_metadata(entry_id)
                except Exception as exc:
                    self._log_provider_error("retrieving metadata", entry_id, exc)
                    self.stats.increment(counters.METADATA_ERRORS)
                    summary.errors += 1
                    continue

                if not metadata.is_directory:
                    self._dispatch(dispatch, metadata, summary)
                    continue

                try:
                    children = self._provider.get_children(entry_id)
                except Exception as exc:
                    self._log_provider_error("retrieving children", entry_id, exc)
                    self.stats.increment(counters.CHILDREN_ERRORS)
                    summary.errors += 1
                    continue

                summary.directories_expanded += 1
                for child in children:
                    if not child.is_directory:
                        self._dispatch(dispatch, child, summary)
                    elif child.id not in self._watchlist:
                        pending.append(child.id)

        self.stats.increment(counters.CYCLES)
        self.stats.increment(counters.ENTRIES_VISITED, summary.visited)
        self.stats.increment(counters.DIRECTORIES_EXPANDED, summary.directories_expanded)
        logger.debug(
            "Cycle complete: %d visited, %d directories, %d files dispatched, %d errors",
            summary.visited,
            summary.directories_expanded,
            summary.files_dispatched,
            summary.errors,
        )
        return summary

    def _dispatch(self, dispatch: queue.Queue, metadata: Metadata, summary: CycleSummary) -> None:
        dispatch.put(metadata)
        summary.files_dispatched += 1
        self.stats.increment(counters.FILES_DISPATCHED)

    @staticmethod
    def _log_provider_error(action: str, entry_id: EntryId, exc: Exception) -> None:
        if isinstance(exc, ProviderError):
            logger.warning("Error %s for %r: %s", action, entry_id, exc)
        else:
            logger.exception("Unexpected error %s for %r", action, entry_id)

    # ---- consumer ----

    def _consume(self, dispatch: queue.Queue) -> None:
        while True:
            item = dispatch.get()
            try:
                if item is _CLOSE:
                    return
                self._evaluate_metadata(item)
            except Exception:
                logger.exception("Error evaluating %r", item)
            finally:
                dispatch.task_done()

    def _evaluate_metadata(self, metadata: Metadata) -> None:
        """Copy *metadata* with a new version if it is newer than the cache."""
        last_modified, _ = self._cache.get(metadata.id)
        if last_modified >= metadata.last_modified:
            self.stats.increment(counters.FILES_UNCHANGED)
            return

        version = self._cache.update(metadata.id, metadata.last_modified)
        try:
            self._provider.copy_file(metadata.id, version)
        except ProviderError as exc:
            logger.warning("Copy of %r version %d failed: %s", metadata.id, version, exc)
            self.stats.increment(counters.COPY_ERRORS)
            return
        except Exception:
            logger.exception("Unexpected error copying %r version %d", metadata.id, version)
            self.stats.increment(counters.COPY_ERRORS)
            return
        self.stats.increment(counters.FILES_COPIED)
        logger.debug("Copied %r as version %d", metadata.id, version)
