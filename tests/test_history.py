"""Tests for the history store and its storage."""

import asyncio
import json

import pytest

from cmdgen.history import HISTORY_KEY, MAX_HISTORY, HistoryStore, filter_history
from cmdgen.storage import LocalStorage, StorageError


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def store(storage):
    return HistoryStore(storage)


def seed(storage, entries):
    storage.set_item(HISTORY_KEY, entries)


class TestRecord:
    """De-duplication with promotion, bounded retention."""

    def test_record_into_empty(self, store):
        assert asyncio.run(store.record("list files")) == ["list files"]

    def test_existing_entry_moves_to_front(self, store, storage):
        seed(storage, ["A", "B", "C"])
        assert asyncio.run(store.record("B")) == ["B", "A", "C"]
        assert storage.get_item(HISTORY_KEY) == ["B", "A", "C"]

    def test_match_is_exact(self, store, storage):
        seed(storage, ["List files"])
        assert asyncio.run(store.record("list files")) == ["list files", "List files"]

    def test_capacity_drops_oldest(self, store, storage):
        entries = [f"request {i}" for i in range(MAX_HISTORY)]
        seed(storage, entries)
        updated = asyncio.run(store.record("D"))
        assert len(updated) == MAX_HISTORY
        assert updated[0] == "D"
        assert f"request {MAX_HISTORY - 1}" not in updated

    def test_custom_capacity(self, storage):
        store = HistoryStore(storage, max_entries=2)
        for entry in ("a", "b", "c"):
            asyncio.run(store.record(entry))
        assert asyncio.run(store.list()) == ["c", "b"]

    def test_persists_across_instances(self, storage):
        asyncio.run(HistoryStore(storage).record("du -sh"))
        assert asyncio.run(HistoryStore(LocalStorage(storage.path)).list()) == ["du -sh"]

    def test_write_failure_raises(self, store, storage, monkeypatch):
        def fail(data):
            raise StorageError("disk full")

        monkeypatch.setattr(storage, "_write_all", fail)
        with pytest.raises(StorageError):
            asyncio.run(store.record("anything"))


class TestListAndClear:

    def test_missing_file_is_empty(self, store):
        assert asyncio.run(store.list()) == []

    def test_corrupt_file_is_empty(self, store, storage):
        storage.path.write_text("{not json")
        assert asyncio.run(store.list()) == []

    def test_malformed_value_is_empty(self, store, storage):
        seed(storage, "not a list")
        assert asyncio.run(store.list()) == []

    def test_non_string_items_dropped(self, store, storage):
        seed(storage, ["ok", 3, None, "fine"])
        assert asyncio.run(store.list()) == ["ok", "fine"]

    def test_record_recovers_from_corrupt_file(self, store, storage):
        storage.path.write_text("{not json")
        assert asyncio.run(store.record("new")) == ["new"]
        assert json.loads(storage.path.read_text()) == {HISTORY_KEY: ["new"]}

    def test_clear_is_idempotent(self, store, storage):
        seed(storage, ["A"])
        assert asyncio.run(store.clear()) == []
        assert asyncio.run(store.clear()) == []
        assert asyncio.run(store.list()) == []

    def test_clear_keeps_other_keys(self, store, storage):
        storage.set_item("other", 1)
        seed(storage, ["A"])
        asyncio.run(store.clear())
        assert storage.get_item("other") == 1


class TestFilter:

    def test_case_insensitive_order_preserved(self):
        assert filter_history(["Alpha", "beta", "Gamma"], "a") == ["Alpha", "beta", "Gamma"]

    def test_subset(self):
        assert filter_history(["Alpha", "beta", "Gamma"], "MM") == ["Gamma"]

    def test_empty_query_returns_all(self):
        entries = ["Alpha", "beta", "Gamma"]
        assert filter_history(entries, "") == entries
        assert filter_history(entries, "   ") == entries

    def test_store_filter(self, store, storage):
        seed(storage, ["find large files", "grep for TODOs", "kill port 3000"])
        assert asyncio.run(store.filter("FI")) == ["find large files"]


class TestLocalStorage:

    def test_write_is_whole_file_replace(self, storage):
        storage.set_item("a", [1])
        storage.set_item("b", [2])
        assert json.loads(storage.path.read_text()) == {"a": [1], "b": [2]}
        assert not list(storage.path.parent.glob("*.tmp"))

    def test_read_of_corrupt_file_raises(self, storage):
        storage.path.write_text("[]")
        with pytest.raises(StorageError):
            storage.get_item("a")

    def test_remove_missing_key_is_noop(self, storage):
        storage.remove_item("nothing")
        assert not storage.path.exists()

    def test_locked_creates_lock_file(self, storage):
        with storage.locked() as locked:
            assert locked is storage
        assert storage.lock_path.exists()
