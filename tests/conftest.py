"""Shared fixtures. Everything runs against in-memory storage."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import ExpenseCategory, ExpenseRecord
from expense_tracker.orchestrator import ExpenseSession
from expense_tracker.services.accounts import AccountService
from expense_tracker.services.storage import (
    InMemoryKeyValueStore,
    KeyValueAccountStorage,
    KeyValueAuditStorage,
    KeyValueLedgerStorage,
    KeyValueSessionMarker,
)


def make_record(
    record_id: int,
    expense_date: date,
    amount: str = "10.00",
    category: ExpenseCategory = ExpenseCategory.FOOD,
    name: str = "Item",
    notes=None,
) -> ExpenseRecord:
    return ExpenseRecord(
        id=record_id,
        name=name,
        amount=Decimal(amount),
        category=category,
        date=expense_date,
        notes=notes,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def session(store):
    return ExpenseSession(
        accounts=AccountService(KeyValueAccountStorage(store)),
        ledger_storage=KeyValueLedgerStorage(store),
        session_marker=KeyValueSessionMarker(store),
        audit_logger=AuditLogger(KeyValueAuditStorage(store, max_events=100)),
    )


@pytest.fixture
def logged_in(session):
    session.signup("alice", "alice@example.com", "secret1", "secret1")
    session.login("alice", "secret1")
    return session
