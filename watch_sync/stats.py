"""Named-counter statistics shared by the monitor and its driver."""

import logging
import threading

logger = logging.getLogger(__name__)

# Counter names incremented by the monitor
CYCLES = "cycles"
ENTRIES_VISITED = "entries_visited"
DIRECTORIES_EXPANDED = "directories_expanded"
FILES_DISPATCHED = "files_dispatched"
FILES_UNCHANGED = "files_unchanged"
FILES_COPIED = "files_copied"
METADATA_ERRORS = "metadata_errors"
CHILDREN_ERRORS = "children_errors"
COPY_ERRORS = "copy_errors"


class StatsCollector:
    """Thread-safe accumulator of named integer counters."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def snapshot(self) -> dict[str, int]:
        """Return a copy of all counters."""
        with self._lock:
            return dict(self._counters)

    def dump_to_log(self) -> None:
        for name, value in sorted(self.snapshot().items()):
            logger.info("%s: %d", name, value)
