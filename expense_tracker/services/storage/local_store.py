"""
Local Key-Value Storage Implementation

DESIGN DECISION: Data lives in a single JSON document on the user's device,
mirroring how a browser keeps localStorage for one origin:
1. No database setup required
2. The file is human-readable and easy to back up
3. A byte quota reproduces the "storage full" failure mode

TRADEOFFS:
- The whole document is rewritten on every change (fine for personal use)
- No transactions; a failed write leaves the previous file untouched

Key layout:
    user:<username>        -> account JSON
    expenses:<username>    -> JSON list of expense records
    budget:<username>      -> JSON decimal string
    audit:<username>       -> JSON list of audit events
    session:active_user    -> username of the active session
"""

import json
import os
import tempfile
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from expense_tracker.config import get_settings
from expense_tracker.models.account import UserAccount
from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import ExpenseRecord, LedgerState
from expense_tracker.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    CorruptDataError,
    KeyValueStoreInterface,
    LedgerStorageInterface,
    SessionMarkerInterface,
    StorageError,
    StorageQuotaExceededError,
)


ACTIVE_USER_KEY = "session:active_user"


def account_key(username: str) -> str:
    return f"user:{username}"


def expenses_key(username: str) -> str:
    return f"expenses:{username}"


def budget_key(username: str) -> str:
    return f"budget:{username}"


def audit_key(username: str) -> str:
    return f"audit:{username}"


# =============================================================================
# KEY-VALUE BACKENDS
# =============================================================================

class InMemoryKeyValueStore(KeyValueStoreInterface):
    """
    Dict-backed store.

    Used in tests and whenever nothing should touch the disk. Supports the
    same quota as the file store so failure handling can be exercised.
    """

    def __init__(self, quota_bytes: int = 0):
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    @staticmethod
    def _serialize(data: dict[str, str]) -> str:
        return json.dumps(data, ensure_ascii=False, sort_keys=True)

    def _check_quota(self, serialized: str) -> None:
        if not self._quota_bytes:
            return
        size = len(serialized.encode("utf-8"))
        if size > self._quota_bytes:
            raise StorageQuotaExceededError(size, self._quota_bytes)

    def _commit(self, data: dict[str, str]) -> None:
        """Validate and apply a new snapshot of the store."""
        self._check_quota(self._serialize(data))
        self._data = data

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        data = dict(self._data)
        data[key] = value
        self._commit(data)

    def remove_item(self, key: str) -> None:
        if key not in self._data:
            return
        data = dict(self._data)
        del data[key]
        self._commit(data)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))

    @property
    def size_bytes(self) -> int:
        return len(self._serialize(self._data).encode("utf-8"))


class LocalKeyValueStore(InMemoryKeyValueStore):
    """
    Store persisted to one JSON file.

    The file is read once on first access and rewritten atomically
    (temp file + rename) on every change. The in-memory snapshot only
    advances after the file write succeeds.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        quota_bytes: Optional[int] = None,
    ):
        settings = get_settings().storage
        super().__init__(
            quota_bytes=settings.quota_bytes if quota_bytes is None else quota_bytes
        )
        self._path = Path(path) if path is not None else settings.store_path
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        if self._path.exists():
            try:
                raw = self._path.read_text(encoding="utf-8")
            except OSError as e:
                raise StorageError(f"Failed to read {self._path}: {e}")
            try:
                data = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as e:
                raise CorruptDataError(str(self._path), str(e))
            if not isinstance(data, dict) or not all(
                isinstance(v, str) for v in data.values()
            ):
                raise CorruptDataError(
                    str(self._path), "expected an object of string values"
                )
            self._data = data
        self._loaded = True

    def _commit(self, data: dict[str, str]) -> None:
        serialized = self._serialize(data)
        self._check_quota(serialized)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(serialized)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

        self._data = data

    def get_item(self, key: str) -> Optional[str]:
        self._ensure_loaded()
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._ensure_loaded()
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        self._ensure_loaded()
        super().remove_item(key)

    def keys(self) -> Iterator[str]:
        self._ensure_loaded()
        return super().keys()


# =============================================================================
# REPOSITORIES
# =============================================================================

class KeyValueAccountStorage(AccountStorageInterface):
    """Accounts stored as JSON under user:<username>."""

    def __init__(self, store: KeyValueStoreInterface):
        self._store = store

    def get_account(self, username: str) -> Optional[UserAccount]:
        key = account_key(username)
        raw = self._store.get_item(key)
        if raw is None:
            return None
        try:
            return UserAccount.model_validate_json(raw)
        except PydanticValidationError as e:
            raise CorruptDataError(key, str(e))

    def save_account(self, account: UserAccount) -> None:
        self._store.set_item(
            account_key(account.username),
            account.model_dump_json(),
        )


class KeyValueLedgerStorage(LedgerStorageInterface):
    """
    Ledger stored as two keys per user: the record list and the budget.

    Records are written in insertion order and read back in the same order.
    """

    def __init__(self, store: KeyValueStoreInterface):
        self._store = store

    def load_records(self, user_id: str) -> list[ExpenseRecord]:
        key = expenses_key(user_id)
        raw = self._store.get_item(key)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(key, str(e))
        if not isinstance(items, list):
            raise CorruptDataError(key, "expected a list of records")
        try:
            records = [ExpenseRecord.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise CorruptDataError(key, str(e))

        seen: set[int] = set()
        for record in records:
            if record.id in seen:
                raise CorruptDataError(key, f"duplicate expense id {record.id}")
            seen.add(record.id)
        return records

    def load_budget(self, user_id: str) -> Decimal:
        key = budget_key(user_id)
        raw = self._store.get_item(key)
        if raw is None:
            return Decimal("0")
        try:
            value = json.loads(raw)
            budget = Decimal(str(value))
        except (json.JSONDecodeError, InvalidOperation) as e:
            raise CorruptDataError(key, str(e))
        if not budget.is_finite() or budget < 0:
            raise CorruptDataError(key, f"invalid budget {value!r}")
        return budget

    def save_records(self, state: LedgerState) -> None:
        payload = [record.model_dump(mode="json") for record in state.records]
        self._store.set_item(
            expenses_key(state.user_id),
            json.dumps(payload, ensure_ascii=False),
        )

    def save_budget(self, state: LedgerState) -> None:
        self._store.set_item(
            budget_key(state.user_id),
            json.dumps(str(state.monthly_budget)),
        )

    def save(self, state: LedgerState) -> None:
        self.save_records(state)
        self.save_budget(state)


class KeyValueAuditStorage(AuditStorageInterface):
    """
    Audit events stored per user as a bounded JSON list (oldest first).

    Events without a username are not persisted.
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        max_events: Optional[int] = None,
    ):
        self._store = store
        self._max_events = (
            max_events
            if max_events is not None
            else get_settings().storage.audit_max_events
        )

    def _read(self, username: str) -> list[dict]:
        key = audit_key(username)
        raw = self._store.get_item(key)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(key, str(e))
        if not isinstance(items, list):
            raise CorruptDataError(key, "expected a list of events")
        return items

    def append_event(self, event: AuditEvent) -> bool:
        if not event.username:
            return False
        items = self._read(event.username)
        items.append(event.to_storage_dict())
        items = items[-self._max_events:]
        self._store.set_item(
            audit_key(event.username),
            json.dumps(items, ensure_ascii=False),
        )
        return True

    def get_recent_events(
        self,
        username: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        items = self._read(username)
        recent = list(reversed(items))[:limit]
        try:
            return [AuditEvent.model_validate(item) for item in recent]
        except PydanticValidationError as e:
            raise CorruptDataError(audit_key(username), str(e))


class KeyValueSessionMarker(SessionMarkerInterface):
    """Active username stored under session:active_user."""

    def __init__(self, store: KeyValueStoreInterface):
        self._store = store

    def get_active_user(self) -> Optional[str]:
        return self._store.get_item(ACTIVE_USER_KEY) or None

    def set_active_user(self, username: str) -> None:
        self._store.set_item(ACTIVE_USER_KEY, username)

    def clear_active_user(self) -> None:
        self._store.remove_item(ACTIVE_USER_KEY)
