"""
Platform-specific locations for Watch Sync.

Centralises OS detection so the config and logging code can ask for a
directory without scattering ``sys.platform`` checks.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"

_APP_DIR_NAME = "WatchSync"

# Overrides the platform default, e.g. for containers and tests.
HOME_ENV_VAR = "WATCH_SYNC_HOME"


def get_config_dir() -> Path:
    """
    Return the application config directory, created if needed.

    - ``$WATCH_SYNC_HOME`` when set
    - Windows : ``%APPDATA%\\WatchSync``
    - macOS   : ``~/Library/Application Support/WatchSync``
    - Linux   : ``$XDG_CONFIG_HOME/WatchSync`` (default ``~/.config``)
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        config_dir = Path(override)
    else:
        if IS_WINDOWS:
            base = os.environ.get("APPDATA", str(Path.home()))
        elif IS_MACOS:
            base = str(Path.home() / "Library" / "Application Support")
        else:
            base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))
        config_dir = Path(base) / _APP_DIR_NAME

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_path() -> Path:
    """Return the default log file path (inside the config directory)."""
    return get_config_dir() / "watch_sync.log"
