"""
Simulation driver for Watch Sync.

Loads a fixture into an in-memory backend and drives a monitor through
one evaluation cycle per update step, then reports what was copied.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import time
from dataclasses import dataclass, field

from watch_sync import __app_name__, __version__
from watch_sync.cache import HistoryCache
from watch_sync.config import Config
from watch_sync.fixtures import Fixture, load_fixture
from watch_sync.model import ProviderError
from watch_sync.monitor import CycleSummary, Monitor
from watch_sync.report import WatchLogEntry, build_watch_log, log_watch_log
from watch_sync.stats import StatsCollector

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(cfg: Config, log_to_file: bool = True) -> None:
    """Configure rotating file log and stderr handler."""
    level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    fmt = logging.Formatter(_LOG_FORMAT)

    if log_to_file:
        log_path = cfg.log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            str(log_path),
            maxBytes=cfg.max_log_size_mb * 1024 * 1024,
            backupCount=cfg.log_backup_count,
            encoding="utf-8",
        )
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root_logger.addHandler(fh)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)


@dataclass
class RunResult:
    cache: HistoryCache
    stats: StatsCollector
    watch_log: list[WatchLogEntry] = field(default_factory=list)
    cycles: list[CycleSummary] = field(default_factory=list)


def run_simulation(
    fixture: Fixture,
    interval_ms: int = 0,
    queue_capacity: int | None = None,
) -> RunResult:
    """
    Drive one monitor through every update step of *fixture*.

    Before each cycle the ids listed for that step are touched on the
    provider.  Ids the provider does not know are logged and ignored.
    """
    cache = HistoryCache()
    stats = StatsCollector()
    kwargs = {} if queue_capacity is None else {"queue_capacity": queue_capacity}
    monitor = Monitor(fixture.provider, fixture.watchlist, cache, stats, **kwargs)
    result = RunResult(cache=cache, stats=stats)

    monitor.start()
    try:
        for step, updates in enumerate(fixture.updates, start=1):
            for entry_id in updates:
                try:
                    fixture.provider.touch(entry_id)
                except ProviderError as exc:
                    logger.warning("Step %d: cannot update %r: %s", step, entry_id, exc)
            result.cycles.append(monitor.evaluate_watchlist())
            logger.info("Step %d: %d files dispatched", step, result.cycles[-1].files_dispatched)
            if interval_ms:
                time.sleep(interval_ms / 1000)
    finally:
        monitor.shut_down()

    result.watch_log = build_watch_log(cache, fixture.watchlist, fixture.provider)
    return result


def run_from_config(cfg: Config) -> RunResult:
    """Load the configured fixture, run it and log the watch log and stats."""
    logger.info("%s %s starting.", __app_name__, __version__)
    fixture = load_fixture(cfg.datafile)
    result = run_simulation(
        fixture,
        interval_ms=cfg.watch_interval_ms,
        queue_capacity=cfg.queue_capacity,
    )
    log_watch_log(result.watch_log)
    result.stats.dump_to_log()
    return result
