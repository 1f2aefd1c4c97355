"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Keep the ledger logic decoupled from where bytes end up
2. Use in-memory storage for testing
3. Swap the local JSON file for something else later

Everything is layered on a tiny string key-value contract, the same shape
as browser localStorage. Repositories for accounts, ledgers, audit events
and the session marker sit on top of it.

All calls are synchronous: a mutation is persisted before control returns
to the caller.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterator, Optional

from expense_tracker.models.account import UserAccount
from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import ExpenseRecord, LedgerState


class KeyValueStoreInterface(ABC):
    """
    Abstract string key-value store.

    Values are JSON documents serialized to text.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored text, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            StorageQuotaExceededError: If the write would exceed capacity
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key. Deleting a missing key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over all stored keys."""
        pass


class AccountStorageInterface(ABC):
    """Identity store: credential records keyed by username."""

    @abstractmethod
    def get_account(self, username: str) -> Optional[UserAccount]:
        """Return the account, or None if it doesn't exist."""
        pass

    @abstractmethod
    def save_account(self, account: UserAccount) -> None:
        """
        Create or replace an account.

        Raises:
            StorageError: If save fails
        """
        pass

    def account_exists(self, username: str) -> bool:
        return self.get_account(username) is not None


class LedgerStorageInterface(ABC):
    """
    Per-user record store for expenses and the monthly budget.

    Records and budget live under separate keys and load independently,
    so a damaged budget never costs the user their expenses.
    """

    @abstractmethod
    def load_records(self, user_id: str) -> list[ExpenseRecord]:
        """
        Load a user's expense records in insertion order.

        Returns:
            The stored records, or an empty list for a user with no data

        Raises:
            CorruptDataError: If the stored records can't be parsed or
                              contain duplicate ids
            StorageError: If reading fails
        """
        pass

    @abstractmethod
    def load_budget(self, user_id: str) -> Decimal:
        """
        Load a user's monthly budget (0 when never set).

        Raises:
            CorruptDataError: If the stored budget isn't a non-negative number
            StorageError: If reading fails
        """
        pass

    def load(self, user_id: str) -> LedgerState:
        """
        Load a user's full ledger.

        Raises:
            CorruptDataError: If either part can't be parsed
            StorageError: If reading fails
        """
        return LedgerState(
            user_id=user_id,
            records=self.load_records(user_id),
            monthly_budget=self.load_budget(user_id),
        )

    @abstractmethod
    def save(self, state: LedgerState) -> None:
        """
        Persist the full ledger state (records and budget).

        Raises:
            StorageQuotaExceededError: If the store is full
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def save_records(self, state: LedgerState) -> None:
        """Persist only the record sequence."""
        pass

    @abstractmethod
    def save_budget(self, state: LedgerState) -> None:
        """Persist only the monthly budget."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never modify stored events.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        username: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events for a user.

        Returns:
            List of recent events (newest first)
        """
        pass


class SessionMarkerInterface(ABC):
    """The single process-wide "active username" value."""

    @abstractmethod
    def get_active_user(self) -> Optional[str]:
        pass

    @abstractmethod
    def set_active_user(self, username: str) -> None:
        pass

    @abstractmethod
    def clear_active_user(self) -> None:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageQuotaExceededError(StorageError):
    """The write would push the store past its capacity."""

    def __init__(self, required_bytes: int, quota_bytes: int):
        self.required_bytes = required_bytes
        self.quota_bytes = quota_bytes
        super().__init__(
            f"Storage quota exceeded: {required_bytes} bytes needed, "
            f"{quota_bytes} bytes allowed"
        )


class CorruptDataError(StorageError):
    """Stored data exists but can't be parsed."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Corrupt data under '{key}': {message}")
