"""
Expense Ledger

The authoritative in-memory collection of one user's expense records plus
their monthly budget.

The ledger itself never touches storage. The session persists the ledger's
state after every mutation, so the ledger stays a plain, testable object.
"""

import time
from decimal import Decimal
from typing import Any, Iterable, Iterator, Optional, Union

from expense_tracker.models.expense import ExpenseRecord, LedgerState


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class DuplicateExpenseError(LedgerError):
    """An expense with the same id is already in the ledger."""

    def __init__(self, expense_id: int):
        self.expense_id = expense_id
        super().__init__(f"Expense id already exists: {expense_id}")


class Ledger:
    """
    Ordered, id-unique sequence of ExpenseRecords for one user.

    Records keep insertion order. There is no update-in-place:
    a record is either present or removed.
    """

    def __init__(self, state: LedgerState):
        self._user_id = state.user_id
        self._records: list[ExpenseRecord] = list(state.records)
        self._ids = {record.id for record in self._records}
        self._monthly_budget = state.monthly_budget

    @classmethod
    def empty(cls, user_id: str) -> "Ledger":
        return cls(LedgerState(user_id=user_id))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def records(self) -> list[ExpenseRecord]:
        """Copy of the records in insertion order."""
        return list(self._records)

    @property
    def monthly_budget(self) -> Decimal:
        return self._monthly_budget

    @property
    def state(self) -> LedgerState:
        """Snapshot of the ledger, suitable for persisting."""
        return LedgerState(
            user_id=self._user_id,
            records=list(self._records),
            monthly_budget=self._monthly_budget,
        )

    def get(self, expense_id: int) -> Optional[ExpenseRecord]:
        for record in self._records:
            if record.id == expense_id:
                return record
        return None

    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ExpenseRecord]:
        return iter(list(self._records))

    def __contains__(self, expense_id: object) -> bool:
        return expense_id in self._ids

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def next_id(self, now_ms: Optional[int] = None) -> int:
        """
        Generate a creation-ordered id.

        Uses the current time in milliseconds, bumped past the largest
        existing id so ids stay unique and increasing.
        """
        candidate = now_ms if now_ms is not None else time.time_ns() // 1_000_000
        if self._ids:
            candidate = max(candidate, max(self._ids) + 1)
        return candidate

    def add(self, record: ExpenseRecord) -> LedgerState:
        """
        Append a record.

        Raises:
            DuplicateExpenseError: If the id is already present
        """
        if record.id in self._ids:
            raise DuplicateExpenseError(record.id)
        self._records.append(record)
        self._ids.add(record.id)
        return self.state

    def remove(self, expense_id: int) -> LedgerState:
        """
        Remove the record with this id.

        Removing an id that isn't there is a no-op, so a repeated delete
        is harmless.
        """
        if expense_id in self._ids:
            self._records = [r for r in self._records if r.id != expense_id]
            self._ids.discard(expense_id)
        return self.state

    def replace_all(
        self,
        records: Iterable[Union[ExpenseRecord, dict[str, Any]]],
    ) -> LedgerState:
        """
        Replace the entire record sequence, e.g. after loading from storage.

        Plain dicts are parsed into ExpenseRecords. Only well-formedness is
        checked; nothing else about the records is validated.

        Raises:
            pydantic.ValidationError: If a record is malformed
            DuplicateExpenseError: If two records share an id
        """
        parsed: list[ExpenseRecord] = []
        ids: set[int] = set()
        for item in records:
            record = (
                item
                if isinstance(item, ExpenseRecord)
                else ExpenseRecord.model_validate(item)
            )
            if record.id in ids:
                raise DuplicateExpenseError(record.id)
            ids.add(record.id)
            parsed.append(record)

        self._records = parsed
        self._ids = ids
        return self.state

    def set_monthly_budget(self, amount: Decimal) -> LedgerState:
        """Set the monthly budget. 0 clears it."""
        if amount < 0:
            raise ValueError("Monthly budget cannot be negative")
        self._monthly_budget = amount
        return self.state
