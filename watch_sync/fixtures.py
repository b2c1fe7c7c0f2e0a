"""
Simulation fixtures: a tree, a watchlist and a sequence of update steps.

Fixtures are JSON documents of the form::

    {
      "filesystem": [
        {"fileId": "dir1", "isDirectory": true,
         "children": [{"fileId": "file2"}]},
        {"fileId": "file1"}
      ],
      "watchlist": ["dir1"],
      "updates": [["file2"], ["file1", "file2"]]
    }

Each inner list of ``updates`` names the entries touched before one
evaluation cycle.
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from watch_sync.mock_provider import InMemoryProvider
from watch_sync.model import ROOT_ID, EntryId

logger = logging.getLogger(__name__)


class FixtureError(ValueError):
    """A fixture file is missing, unreadable or malformed."""


@dataclass
class Fixture:
    provider: InMemoryProvider
    watchlist: list[EntryId] = field(default_factory=list)
    updates: list[list[EntryId]] = field(default_factory=list)


# ---- loading ----


def load_fixture(path: str | Path) -> Fixture:
    """Build an :class:`InMemoryProvider`, watchlist and updates from *path*."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (ValueError, OSError) as exc:
        raise FixtureError(f"Could not read fixture {path}: {exc}") from exc
    fixture = fixture_from_dict(data)
    logger.info(
        "Loaded fixture %s (%d entries, %d watched, %d update steps)",
        path,
        len(fixture.provider),
        len(fixture.watchlist),
        len(fixture.updates),
    )
    return fixture


def fixture_from_dict(data: dict[str, Any]) -> Fixture:
    if not isinstance(data, dict):
        raise FixtureError("fixture must be a JSON object")
    provider = InMemoryProvider()
    try:
        for node in data.get("filesystem") or []:
            _add_node(provider, node, ROOT_ID)
    except (KeyError, TypeError, ValueError) as exc:
        raise FixtureError(f"malformed filesystem: {exc}") from exc

    watchlist = [EntryId(str(i)) for i in _id_list(data.get("watchlist"), "watchlist")]
    updates = [
        [EntryId(str(i)) for i in _id_list(step, "updates step")]
        for step in _id_list(data.get("updates"), "updates")
    ]
    return Fixture(provider=provider, watchlist=watchlist, updates=updates)


def _id_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise FixtureError(f"{what} must be a list, not {type(value).__name__}")
    return value


def _add_node(provider: InMemoryProvider, node: dict[str, Any], parent_id: EntryId) -> None:
    entry_id = EntryId(str(node["fileId"]))
    if node.get("isDirectory"):
        provider.add_directory(entry_id, parent_id)
        for child in node.get("children") or []:
            _add_node(provider, child, entry_id)
    else:
        provider.add_file(entry_id, parent_id)


# ---- generation ----


def generate_fixture(
    num_files: int = 10_000,
    num_dirs: int = 100,
    watchlist_size: int = 500,
    num_iterations: int = 10,
    update_size: int = 5_000,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    """
    Generate a random fixture document.

    Top-level directories get 5-15 files and 1-3 subdirectories of 5-10
    files each, until the directory budget runs out.  Files left over
    after that go to the root.  The watchlist and each update step are
    random samples of the generated file ids.
    """
    rng = rng or random.Random()
    filesystem: list[dict[str, Any]] = []
    all_files: list[str] = []
    file_counter = 1
    dir_counter = 1

    def _files(count: int) -> list[dict[str, Any]]:
        nonlocal file_counter
        nodes = []
        for _ in range(count):
            if file_counter > num_files:
                break
            file_id = f"file{file_counter}"
            file_counter += 1
            nodes.append({"fileId": file_id})
            all_files.append(file_id)
        return nodes

    while dir_counter <= num_dirs:
        directory = {
            "fileId": f"dir{dir_counter}",
            "isDirectory": True,
            "children": _files(rng.randint(5, 15)),
        }
        dir_counter += 1
        for _ in range(rng.randint(1, 3)):
            if dir_counter > num_dirs:
                break
            directory["children"].append({
                "fileId": f"dir{dir_counter}",
                "isDirectory": True,
                "children": _files(rng.randint(5, 10)),
            })
            dir_counter += 1
        filesystem.append(directory)

    filesystem.extend(_files(num_files - file_counter + 1))

    watchlist = rng.sample(all_files, min(watchlist_size, len(all_files)))
    updates = [
        rng.sample(all_files, min(update_size, len(all_files)))
        for _ in range(num_iterations)
    ]
    return {"filesystem": filesystem, "watchlist": watchlist, "updates": updates}


def write_fixture(data: dict[str, Any], path: str | Path) -> None:
    """Write a fixture document to *path* as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=4)
    logger.info("Fixture written to %s", path)
