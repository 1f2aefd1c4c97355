"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local JSON key-value store, but designed to be swappable.
"""

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
from expense_tracker.services.storage.local_store import (
    ACTIVE_USER_KEY,
    InMemoryKeyValueStore,
    KeyValueAccountStorage,
    KeyValueAuditStorage,
    KeyValueLedgerStorage,
    KeyValueSessionMarker,
    LocalKeyValueStore,
    account_key,
    audit_key,
    budget_key,
    expenses_key,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "AuditStorageInterface",
    "KeyValueStoreInterface",
    "LedgerStorageInterface",
    "SessionMarkerInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageQuotaExceededError",
    # Local implementation
    "ACTIVE_USER_KEY",
    "InMemoryKeyValueStore",
    "KeyValueAccountStorage",
    "KeyValueAuditStorage",
    "KeyValueLedgerStorage",
    "KeyValueSessionMarker",
    "LocalKeyValueStore",
    "account_key",
    "audit_key",
    "budget_key",
    "expenses_key",
]
