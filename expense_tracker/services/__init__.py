"""Services package."""

from expense_tracker.services.accounts import (
    AccountExistsError,
    AccountService,
    AuthError,
)
from expense_tracker.services.storage import (
    AccountStorageInterface,
    AuditStorageInterface,
    CorruptDataError,
    InMemoryKeyValueStore,
    KeyValueAccountStorage,
    KeyValueAuditStorage,
    KeyValueLedgerStorage,
    KeyValueSessionMarker,
    KeyValueStoreInterface,
    LedgerStorageInterface,
    LocalKeyValueStore,
    SessionMarkerInterface,
    StorageError,
    StorageQuotaExceededError,
)

__all__ = [
    # Account services
    "AccountExistsError",
    "AccountService",
    "AuthError",
    # Storage services
    "AccountStorageInterface",
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryKeyValueStore",
    "KeyValueAccountStorage",
    "KeyValueAuditStorage",
    "KeyValueLedgerStorage",
    "KeyValueSessionMarker",
    "KeyValueStoreInterface",
    "LedgerStorageInterface",
    "LocalKeyValueStore",
    "SessionMarkerInterface",
    "StorageError",
    "StorageQuotaExceededError",
]
