"""
Tests for the key-value backends and the typed LedgerStore.
"""

import json
import pytest
from datetime import date
from decimal import Decimal

from finledger.models import Expense, User
from finledger.services.storage import (
    CURRENT_USER_KEY,
    InMemoryStorage,
    JsonFileStorage,
    LedgerStore,
    StorageError,
    scoped_key,
)


class TestInMemoryStorage:
    """Tests for the dict-backed backend."""

    def test_absent_key_reads_none(self):
        """Test that unknown keys read as None."""
        assert InMemoryStorage().get_item("missing") is None

    def test_set_overwrites(self):
        """Test that set replaces the previous value."""
        storage = InMemoryStorage()
        storage.set_item("k", "one")
        storage.set_item("k", "two")
        assert storage.get_item("k") == "two"
        assert storage.keys() == ["k"]

    def test_remove(self):
        """Test removal reports whether anything was there."""
        storage = InMemoryStorage({"k": "v"})
        assert storage.remove_item("k") is True
        assert storage.remove_item("k") is False


class TestJsonFileStorage:
    """Tests for the one-file-per-key backend."""

    def test_round_trip_creates_directory(self, tmp_path):
        """Test that the data directory is created on first write."""
        storage = JsonFileStorage(tmp_path / "data")
        storage.set_item("expenses_user-1", "[]")
        assert (tmp_path / "data" / "expenses_user-1.json").read_text() == "[]"
        assert storage.get_item("expenses_user-1") == "[]"

    def test_absent_key_reads_none(self, tmp_path):
        """Test that a missing file reads as None."""
        assert JsonFileStorage(tmp_path).get_item("users") is None

    def test_keys_are_sorted_and_skip_temp_files(self, tmp_path):
        """Test key listing ignores stray temp files."""
        storage = JsonFileStorage(tmp_path)
        storage.set_item("users", "[]")
        storage.set_item("family-goals", "[]")
        (tmp_path / ".users.abc.tmp").write_text("partial")
        assert storage.keys() == ["family-goals", "users"]

    def test_remove(self, tmp_path):
        """Test that removing deletes the file."""
        storage = JsonFileStorage(tmp_path)
        storage.set_item("currentUser", "{}")
        assert storage.remove_item("currentUser") is True
        assert storage.remove_item("currentUser") is False
        assert not (tmp_path / "currentUser.json").exists()

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", ".hidden"])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        """Test that keys can't point outside the data directory."""
        with pytest.raises(ValueError):
            JsonFileStorage(tmp_path).set_item(key, "[]")

    def test_os_errors_become_storage_errors(self, tmp_path):
        """Test that a persistent OS failure surfaces as StorageError."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        storage = JsonFileStorage(blocker)
        with pytest.raises(StorageError):
            storage.set_item("users", "[]")


class TestLedgerStore:
    """Tests for typed reads and writes over a backend."""

    def test_absent_key_is_empty(self, store):
        """Test that an absent slot reads as an empty collection."""
        assert store.get("expenses_user-1", Expense) == []

    def test_set_then_get(self, store):
        """Test that records survive a write and read."""
        expense = Expense(amount=Decimal("9.99"), category="Food", date=date(2024, 1, 1))
        store.set("expenses_user-1", [expense])
        assert store.get("expenses_user-1", Expense) == [expense]

    def test_set_overwrites_whole_slot(self, store):
        """Test that set replaces rather than merges."""
        first = Expense(amount=Decimal("1"), category="Food", date=date(2024, 1, 1))
        second = Expense(amount=Decimal("2"), category="Food", date=date(2024, 1, 2))
        store.set("k", [first])
        store.set("k", [second])
        assert [e.id for e in store.get("k", Expense)] == [second.id]

    def test_malformed_json_reads_empty(self, storage, store):
        """Test that unparseable data reads as empty instead of raising."""
        storage.set_item("k", "{not json")
        assert store.get("k", Expense) == []

    def test_non_list_payload_reads_empty(self, storage, store):
        """Test that an object where a list belongs reads as empty."""
        storage.set_item("k", json.dumps({"amount": 1}))
        assert store.get("k", Expense) == []

    def test_invalid_items_are_skipped(self, storage, store):
        """Test that one bad record doesn't hide the good ones."""
        storage.set_item("k", json.dumps([
            {"id": "good", "amount": 5, "category": "Food", "date": "2024-01-01"},
            {"id": "bad", "amount": -5, "category": "Food", "date": "2024-01-01"},
            "not even an object",
        ]))
        assert [e.id for e in store.get("k", Expense)] == ["good"]

    def test_typed_write_keeps_unreadable_items(self, storage, store):
        """Test that a write naming its model carries skipped items over."""
        legacy = {"id": "bad", "amount": -5, "category": "Food", "date": "2024-01-01"}
        storage.set_item("k", json.dumps([
            {"id": "good", "amount": 5, "category": "Food", "date": "2024-01-01"},
            legacy,
        ]))

        fresh = Expense(id="new", amount=Decimal("3"), category="Food", date=date(2024, 1, 2))
        store.set("k", [fresh], model=Expense)

        assert json.loads(storage.get_item("k")) == [fresh.model_dump(mode="json"), legacy]
        assert [e.id for e in store.get("k", Expense)] == ["new"]

    def test_untyped_write_replaces_everything(self, storage, store):
        """Test that a write without a model is a plain overwrite."""
        storage.set_item("k", json.dumps([{"id": "bad", "amount": -5}]))
        store.set("k", [])
        assert json.loads(storage.get_item("k")) == []

    def test_single_object_round_trip(self, store):
        """Test get_object/set_object, excluding a field."""
        user = User(email="a@b.co", password_hash="secret-hash")
        store.set_object(CURRENT_USER_KEY, user, exclude={"password_hash"})
        restored = store.get_object(CURRENT_USER_KEY, User)
        assert restored.id == user.id
        assert restored.password_hash is None

    def test_malformed_object_reads_none(self, storage, store):
        """Test that a broken session object reads as no session."""
        storage.set_item(CURRENT_USER_KEY, "[1, 2")
        assert store.get_object(CURRENT_USER_KEY, User) is None

    def test_scoped_key(self):
        """Test per-user key naming."""
        assert scoped_key("expenses", "u1") == "expenses_u1"
        assert scoped_key("users") == "users"
