"""Pytest bootstrap and shared fixtures.

The ``pytest`` console script can run with a sys.path that excludes the
repository root. Ensure ``import watch_sync`` resolves to the local package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

from watch_sync.cache import HistoryCache  # noqa: E402
from watch_sync.mock_provider import InMemoryProvider  # noqa: E402


@pytest.fixture
def small_tree() -> InMemoryProvider:
    """dir1 -> {dir2 -> {file3}, dir3, file2}; file1 at the root."""
    fp = InMemoryProvider()
    fp.add_directory("dir1", "", last_modified=100)
    fp.add_directory("dir2", "dir1", last_modified=100)
    fp.add_directory("dir3", "dir1", last_modified=100)
    fp.add_file("file1", "", last_modified=1_000)
    fp.add_file("file2", "dir1", last_modified=1_000)
    fp.add_file("file3", "dir2", last_modified=1_000)
    return fp


@pytest.fixture
def cache() -> HistoryCache:
    return HistoryCache()
