from __future__ import annotations

import random

import pytest

from watch_sync.mock_provider import InMemoryProvider
from watch_sync.model import (
    ROOT_ID,
    EntryId,
    EntryIsADirectoryError,
    EntryNotADirectoryError,
    EntryNotFoundError,
    ProviderError,
)


def _ids(metadata) -> list[str]:
    return [m.id for m in metadata]


def test_manual_tree_children(small_tree: InMemoryProvider) -> None:
    assert len(small_tree) == 6
    assert _ids(small_tree.get_children(ROOT_ID)) == ["dir1", "file1"]
    assert _ids(small_tree.get_children(EntryId("dir1"))) == ["dir2", "dir3", "file2"]
    assert _ids(small_tree.get_children(EntryId("dir2"))) == ["file3"]
    assert small_tree.get_children(EntryId("dir3")) == []


def test_empty_provider_has_empty_root() -> None:
    assert InMemoryProvider().get_children(ROOT_ID) == []


def test_retrieve_metadata(small_tree: InMemoryProvider) -> None:
    meta = small_tree.retrieve_metadata(EntryId("file3"))
    assert meta.id == "file3"
    assert meta.last_modified == 1_000
    assert not meta.is_directory
    assert small_tree.retrieve_metadata(EntryId("dir2")).is_directory
    assert small_tree.retrieve_metadata(ROOT_ID).is_directory


def test_unknown_ids_raise_not_found(small_tree: InMemoryProvider) -> None:
    with pytest.raises(EntryNotFoundError):
        small_tree.retrieve_metadata(EntryId("nope"))
    with pytest.raises(EntryNotFoundError):
        small_tree.get_children(EntryId("nope"))
    with pytest.raises(EntryNotFoundError):
        small_tree.copy_file(EntryId("nope"), 1)


def test_kind_mismatches(small_tree: InMemoryProvider) -> None:
    with pytest.raises(EntryNotADirectoryError):
        small_tree.get_children(EntryId("file1"))
    with pytest.raises(EntryIsADirectoryError):
        small_tree.copy_file(EntryId("dir1"), 1)
    with pytest.raises(EntryIsADirectoryError):
        small_tree.copy_file(ROOT_ID, 1)


def test_errors_share_provider_base_and_carry_id(small_tree: InMemoryProvider) -> None:
    with pytest.raises(ProviderError) as info:
        small_tree.get_children(EntryId("file2"))
    assert info.value.entry_id == "file2"
    assert "file2" in str(info.value)


def test_copy_file_records_request(small_tree: InMemoryProvider) -> None:
    small_tree.copy_file(EntryId("file1"), 3)
    assert small_tree.copies == [("file1", 3)]


def test_add_rejects_bad_parents_and_duplicates(small_tree: InMemoryProvider) -> None:
    with pytest.raises(ValueError):
        small_tree.add_file("file1")
    with pytest.raises(EntryNotFoundError):
        small_tree.add_file("x", "missing")
    with pytest.raises(EntryNotADirectoryError):
        small_tree.add_file("x", "file1")
    with pytest.raises(ValueError):
        small_tree.add_directory("")


def test_touch_always_moves_timestamp_forward(small_tree: InMemoryProvider) -> None:
    small_tree.set_last_modified("file1", 10**15)  # far in the future
    first = small_tree.touch("file1")
    second = small_tree.touch("file1")
    assert first == 10**15 + 1
    assert second == first + 1
    assert small_tree.retrieve_metadata(EntryId("file1")).last_modified == second


def test_touch_any_touches_a_known_entry(small_tree: InMemoryProvider) -> None:
    before = {e: small_tree.retrieve_metadata(EntryId(e)).last_modified for e in ("dir1", "file1")}
    touched = small_tree.touch_any(random.Random(3))
    assert touched in small_tree
    if touched in before:
        assert small_tree.retrieve_metadata(touched).last_modified > before[touched]


def test_touch_any_on_empty_provider() -> None:
    with pytest.raises(EntryNotFoundError):
        InMemoryProvider().touch_any()


def test_random_tree_shape() -> None:
    fp = InMemoryProvider.random(500, 10, random.Random(7))
    assert len(fp) == 510

    root_ids = _ids(fp.get_children(ROOT_ID))
    assert "directory1" in root_ids
    assert "directory2" in root_ids
    # the first tenth of the files stay at the root
    assert {f"file{i}" for i in range(1, 51)} <= set(root_ids)

    def walk(entry_id: EntryId) -> int:
        total = 0
        for child in fp.get_children(entry_id):
            total += 1
            if child.is_directory:
                total += walk(child.id)
        return total

    assert walk(ROOT_ID) == 510


def test_random_tree_without_directories() -> None:
    fp = InMemoryProvider.random(20, 0, random.Random(1))
    assert len(fp.get_children(ROOT_ID)) == 20


def test_create_watchlist_picks_distinct_ids() -> None:
    fp = InMemoryProvider.random(20, 10, random.Random(2))
    watchlist = fp.create_watchlist(10, random.Random(2))
    assert len(watchlist) == 10
    assert len(set(watchlist)) == 10
    assert all(entry_id in fp for entry_id in watchlist)
    assert len(fp.create_watchlist(100)) == 30
