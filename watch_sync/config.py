"""Configuration management for Watch Sync.

Stores and retrieves run settings from a JSON config file, by default in
the platform-appropriate application data directory.
"""

import json
import logging
from pathlib import Path
from typing import Any

from watch_sync.monitor import DEFAULT_QUEUE_CAPACITY
from watch_sync.platform_utils import (
    get_config_dir as _platform_config_dir,
)
from watch_sync.platform_utils import (
    get_log_path as _platform_log_path,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "datafile": "testdata.json",  # fixture JSON, relative to the config file
    "watch_interval_ms": 1000,  # pause between evaluation cycles
    "queue_capacity": DEFAULT_QUEUE_CAPACITY,
    "log_level": "INFO",
    "log_file": "",  # blank = platform default
    # ---- log rotation ----
    "max_log_size_mb": 10,
    "log_backup_count": 3,
}


def get_config_dir() -> Path:
    """Return the platform-appropriate application config directory."""
    return _platform_config_dir()


def get_config_path() -> Path:
    """Return the path to the default configuration file."""
    return get_config_dir() / "config.json"


class Config:
    """Configuration manager backed by a JSON file."""

    def __init__(self, path: Path | str | None = None):
        """Load config from *path*, falling back to the platform default."""
        self._path = Path(path) if path else get_config_path()
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    # ---- persistence ----

    def load(self) -> None:
        """Load configuration from disk, applying defaults for missing keys."""
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as fh:
                    stored = json.load(fh)
                if not isinstance(stored, dict):
                    raise ValueError("top level is not an object")
                self._data = {**DEFAULT_CONFIG, **stored}
                logger.info("Configuration loaded from %s", self._path)
            except (json.JSONDecodeError, ValueError, OSError) as exc:
                logger.warning("Could not read config (%s); using defaults.", exc)
                self._data = dict(DEFAULT_CONFIG)
        else:
            self._data = dict(DEFAULT_CONFIG)
            self.save()
            logger.info("Created default configuration at %s", self._path)

    def save(self) -> None:
        """Persist the current configuration to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2)
            logger.info("Configuration saved.")
        except OSError as exc:
            logger.error("Failed to save configuration: %s", exc)

    # ---- accessors ----

    @property
    def datafile(self) -> Path:
        """Return the fixture path, resolved against the config file's folder."""
        path = Path(self._data["datafile"])
        if not path.is_absolute():
            path = self._path.parent / path
        return path

    @datafile.setter
    def datafile(self, value: str | Path) -> None:
        self._data["datafile"] = str(value)

    @property
    def watch_interval_ms(self) -> int:
        """Return the pause between evaluation cycles in milliseconds."""
        return max(0, int(self._data["watch_interval_ms"]))

    @watch_interval_ms.setter
    def watch_interval_ms(self, value: int) -> None:
        """Set the pause between cycles (minimum 0 ms)."""
        self._data["watch_interval_ms"] = max(0, int(value))

    @property
    def queue_capacity(self) -> int:
        return max(1, int(self._data.get("queue_capacity", DEFAULT_QUEUE_CAPACITY)))

    @queue_capacity.setter
    def queue_capacity(self, value: int) -> None:
        """Set the dispatch queue bound (minimum 1)."""
        self._data["queue_capacity"] = max(1, int(value))

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return self._data.get("log_level", "INFO")

    @log_level.setter
    def log_level(self, value: str) -> None:
        self._data["log_level"] = value.strip().upper() or "INFO"

    @property
    def log_file(self) -> Path:
        """Return the log file path (platform default when blank)."""
        value = self._data.get("log_file", "")
        return Path(value) if value else _platform_log_path()

    @log_file.setter
    def log_file(self, value: str | Path) -> None:
        self._data["log_file"] = str(value)

    # ---- log rotation ----

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return int(self._data.get("max_log_size_mb", 10))

    @max_log_size_mb.setter
    def max_log_size_mb(self, value: int) -> None:
        """Set the maximum log file size in MB (minimum 1)."""
        self._data["max_log_size_mb"] = max(1, int(value))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return int(self._data.get("log_backup_count", 3))

    @log_backup_count.setter
    def log_backup_count(self, value: int) -> None:
        """Set the number of rotated log backups to keep."""
        self._data["log_backup_count"] = max(0, int(value))
