"""Tests for the key-value store and the repositories built on it."""

import json
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from expense_tracker.models.account import UserAccount
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.expense import LedgerState
from expense_tracker.services.storage import (
    ACTIVE_USER_KEY,
    CorruptDataError,
    InMemoryKeyValueStore,
    KeyValueAccountStorage,
    KeyValueAuditStorage,
    KeyValueLedgerStorage,
    KeyValueSessionMarker,
    LocalKeyValueStore,
    StorageError,
    StorageQuotaExceededError,
    budget_key,
    expenses_key,
)

from conftest import make_record


class TestInMemoryKeyValueStore:
    """Tests for the dict-backed store."""

    def test_set_get_remove(self):
        """Test the basic key-value contract."""
        store = InMemoryKeyValueStore()
        store.set_item("a", "1")

        assert store.get_item("a") == "1"
        assert list(store.keys()) == ["a"]

        store.remove_item("a")
        assert store.get_item("a") is None

    def test_remove_missing_key(self):
        """Test removing a missing key is not an error."""
        store = InMemoryKeyValueStore()
        store.remove_item("nope")
        assert list(store.keys()) == []

    def test_quota_exceeded_leaves_data_unchanged(self):
        """Test that a write past the quota is refused whole."""
        store = InMemoryKeyValueStore(quota_bytes=40)
        store.set_item("a", "small")

        with pytest.raises(StorageQuotaExceededError) as exc_info:
            store.set_item("b", "x" * 100)

        assert exc_info.value.quota_bytes == 40
        assert store.get_item("a") == "small"
        assert store.get_item("b") is None

    def test_quota_error_is_storage_error(self):
        """Test the quota error is part of the storage error family."""
        store = InMemoryKeyValueStore(quota_bytes=1)
        with pytest.raises(StorageError):
            store.set_item("a", "b")

    def test_zero_quota_is_unlimited(self):
        """Test that quota 0 disables the check."""
        store = InMemoryKeyValueStore(quota_bytes=0)
        store.set_item("big", "x" * 100_000)
        assert store.size_bytes > 100_000


class TestLocalKeyValueStore:
    """Tests for the JSON-file store."""

    def test_round_trip_through_file(self, tmp_path):
        """Test that a new store instance sees earlier writes."""
        path = tmp_path / "store.json"
        LocalKeyValueStore(path=path, quota_bytes=0).set_item("k", "v")

        reopened = LocalKeyValueStore(path=path, quota_bytes=0)

        assert reopened.get_item("k") == "v"
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_missing_file_is_empty(self, tmp_path):
        """Test that a store with no file yet reads as empty."""
        store = LocalKeyValueStore(path=tmp_path / "nothing.json", quota_bytes=0)
        assert store.get_item("k") is None

    def test_creates_parent_directory(self, tmp_path):
        """Test that the data directory is created on first write."""
        path = tmp_path / "nested" / "dir" / "store.json"
        LocalKeyValueStore(path=path, quota_bytes=0).set_item("k", "v")
        assert path.exists()

    def test_corrupt_file_raises(self, tmp_path):
        """Test that unreadable JSON is reported as corrupt."""
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        store = LocalKeyValueStore(path=path, quota_bytes=0)

        with pytest.raises(CorruptDataError):
            store.get_item("k")

    def test_non_string_values_rejected(self, tmp_path):
        """Test that the document must map keys to strings."""
        path = tmp_path / "store.json"
        path.write_text('{"k": 1}', encoding="utf-8")

        with pytest.raises(CorruptDataError):
            LocalKeyValueStore(path=path, quota_bytes=0).get_item("k")

    def test_quota_failure_keeps_previous_file(self, tmp_path):
        """Test that a refused write leaves the file as it was."""
        path = tmp_path / "store.json"
        store = LocalKeyValueStore(path=path, quota_bytes=50)
        store.set_item("k", "v")
        before = path.read_text(encoding="utf-8")

        with pytest.raises(StorageQuotaExceededError):
            store.set_item("big", "x" * 200)

        assert path.read_text(encoding="utf-8") == before
        assert store.get_item("big") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        """Test that the atomic write cleans up."""
        path = tmp_path / "store.json"
        store = LocalKeyValueStore(path=path, quota_bytes=0)
        store.set_item("a", "1")
        store.set_item("b", "2")

        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestAccountStorage:
    """Tests for KeyValueAccountStorage."""

    def test_save_and_get(self, store):
        """Test saving and reading an account."""
        storage = KeyValueAccountStorage(store)
        storage.save_account(UserAccount(username="alice", password="secret1"))

        account = storage.get_account("alice")

        assert account.username == "alice"
        assert account.password == "secret1"
        assert storage.account_exists("alice") is True
        assert storage.account_exists("bob") is False

    def test_corrupt_account_raises(self, store):
        """Test that a garbled account record is reported."""
        store.set_item("user:alice", '{"username": "alice"}')

        with pytest.raises(CorruptDataError):
            KeyValueAccountStorage(store).get_account("alice")


class TestLedgerStorage:
    """Tests for KeyValueLedgerStorage."""

    def test_unknown_user_loads_empty(self, store):
        """Test that a user with no data gets an empty ledger."""
        state = KeyValueLedgerStorage(store).load("nobody")

        assert state.user_id == "nobody"
        assert state.records == []
        assert state.monthly_budget == Decimal("0")

    def test_round_trip_keeps_order_and_values(self, store):
        """Test saving then loading gives the same ledger."""
        storage = KeyValueLedgerStorage(store)
        state = LedgerState(
            user_id="alice",
            records=[
                make_record(3, date(2024, 1, 3), amount="12.50", notes="n"),
                make_record(1, date(2024, 1, 1), amount="0.10"),
            ],
            monthly_budget=Decimal("1000.50"),
        )

        storage.save(state)
        loaded = storage.load("alice")

        assert loaded == state

    def test_budget_stored_as_decimal_string(self, store):
        """Test the budget is written as a JSON string."""
        storage = KeyValueLedgerStorage(store)
        storage.save_budget(LedgerState(user_id="alice", monthly_budget=Decimal("250.75")))

        assert json.loads(store.get_item(budget_key("alice"))) == "250.75"

    def test_budget_accepts_plain_number(self, store):
        """Test that a numeric budget value still loads."""
        store.set_item(budget_key("alice"), "500")

        assert KeyValueLedgerStorage(store).load("alice").monthly_budget == Decimal("500")

    def test_negative_budget_is_corrupt(self, store):
        """Test that a negative stored budget is rejected."""
        store.set_item(budget_key("alice"), '"-5"')

        with pytest.raises(CorruptDataError):
            KeyValueLedgerStorage(store).load("alice")

    def test_garbled_expenses_are_corrupt(self, store):
        """Test that unparseable expenses raise CorruptDataError."""
        store.set_item(expenses_key("alice"), "[{broken")

        with pytest.raises(CorruptDataError):
            KeyValueLedgerStorage(store).load("alice")

    def test_duplicate_ids_in_storage_are_corrupt(self, store):
        """Test that stored duplicates are caught on load."""
        record = make_record(1, date(2024, 1, 1)).model_dump(mode="json")
        store.set_item(expenses_key("alice"), json.dumps([record, record]))

        with pytest.raises(CorruptDataError):
            KeyValueLedgerStorage(store).load("alice")

    def test_parts_load_independently(self, store):
        """Test that a bad budget doesn't stop the records from loading."""
        storage = KeyValueLedgerStorage(store)
        storage.save_records(LedgerState(user_id="alice", records=[make_record(1, date(2024, 1, 1))]))
        store.set_item(budget_key("alice"), '"abc"')

        assert [r.id for r in storage.load_records("alice")] == [1]
        with pytest.raises(CorruptDataError):
            storage.load_budget("alice")

    def test_users_are_isolated(self, store):
        """Test that one user's data never shows up for another."""
        storage = KeyValueLedgerStorage(store)
        storage.save(LedgerState(user_id="alice", records=[make_record(1, date(2024, 1, 1))]))

        assert storage.load("bob").records == []


class TestAuditStorage:
    """Tests for KeyValueAuditStorage."""

    def test_newest_first(self, store):
        """Test that recent events come back newest first."""
        storage = KeyValueAuditStorage(store, max_events=10)
        storage.append_event(AuditEventBuilder.login_succeeded("alice"))
        storage.append_event(AuditEventBuilder.logout("alice"))

        events = storage.get_recent_events("alice")

        assert [e.event_type.value for e in events] == ["logout", "login_succeeded"]

    def test_bounded(self, store):
        """Test that only the newest max_events are kept."""
        storage = KeyValueAuditStorage(store, max_events=3)
        for i in range(5):
            storage.append_event(AuditEventBuilder.expense_deleted("alice", i, found=True))

        events = storage.get_recent_events("alice")

        assert [e.entity_id for e in events] == [4, 3, 2]

    def test_limit(self, store):
        """Test the limit argument."""
        storage = KeyValueAuditStorage(store, max_events=10)
        for i in range(4):
            storage.append_event(AuditEventBuilder.expense_deleted("alice", i, found=True))

        assert len(storage.get_recent_events("alice", limit=2)) == 2

    def test_event_without_username_not_stored(self, store):
        """Test that anonymous events are skipped."""
        storage = KeyValueAuditStorage(store, max_events=10)
        event = AuditEventBuilder.login_failed("")

        assert storage.append_event(event) is False
        assert list(store.keys()) == []


class TestSessionMarker:
    """Tests for KeyValueSessionMarker."""

    def test_set_get_clear(self, store):
        """Test the active-user marker."""
        marker = KeyValueSessionMarker(store)
        assert marker.get_active_user() is None

        marker.set_active_user("alice")
        assert marker.get_active_user() == "alice"
        assert store.get_item(ACTIVE_USER_KEY) == "alice"

        marker.clear_active_user()
        assert marker.get_active_user() is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
