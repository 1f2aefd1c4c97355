"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for local storage
4. Keep stored records immutable once created

DESIGN DECISION: Form input (NewExpense) and stored records (ExpenseRecord)
are separate models. Input rules such as "amount must not be negative" are
enforced on the form; stored records are only checked for well-formedness,
so old or hand-edited data still loads.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent grouping and makes the category filter an exact match.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"


class PeriodFilter(str, Enum):
    """Time-window criterion for the expense list."""
    ALL = "all"
    TODAY = "today"
    LAST_7_DAYS = "last7days"    # Rolling 168 hours, not calendar days
    THIS_MONTH = "thisMonth"


class BudgetStatus(str, Enum):
    """
    Result of comparing this month's spend with the monthly budget.

    UNSET is reported whenever the budget is 0.
    """
    UNSET = "unset"
    SAFE = "safe"
    WARNING = "warning"
    EXCEEDED = "exceeded"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class NewExpense(BaseModel):
    """
    An expense as entered by the user, before it joins the ledger.

    The session turns this into an ExpenseRecord by assigning an id
    and a creation timestamp.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount spent"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )
    # Calendar date, no time component
    date: date
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Free-form notes"
    )

    @field_validator('notes')
    @classmethod
    def empty_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank notes as absent."""
        return v or None


class ExpenseRecord(BaseModel):
    """
    A single expense in a user's ledger.

    CRITICAL: Records are immutable. The only way to change one is to
    delete it and add a new one.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(
        ...,
        ge=0,
        description="Unique, creation-ordered identifier"
    )
    name: str = Field(
        ...,
        description="What the money was spent on"
    )
    # Not constrained to >= 0 so that stored data always loads
    amount: Decimal = Field(
        ...,
        description="Amount spent"
    )
    category: ExpenseCategory
    date: date
    notes: Optional[str] = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the record was created"
    )

    @classmethod
    def from_new_expense(
        cls,
        expense: NewExpense,
        record_id: int,
        created_at: Optional[datetime] = None,
    ) -> "ExpenseRecord":
        """Build a ledger record from validated form input."""
        return cls(
            id=record_id,
            name=expense.name,
            amount=expense.amount,
            category=expense.category,
            date=expense.date,
            notes=expense.notes,
            created_at=created_at or datetime.now(timezone.utc),
        )


class LedgerState(BaseModel):
    """
    Everything stored for one user: their records and monthly budget.

    monthly_budget == 0 means "no budget configured".
    """

    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of this ledger (the username)"
    )
    records: list[ExpenseRecord] = Field(
        default_factory=list,
        description="Records in insertion order"
    )
    monthly_budget: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Monthly spending limit, 0 when unset"
    )

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'LedgerState':
        """Every id in a ledger must be unique."""
        seen = set()
        for record in self.records:
            if record.id in seen:
                raise ValueError(f"Duplicate expense id: {record.id}")
            seen.add(record.id)
        return self

    @property
    def has_budget(self) -> bool:
        return self.monthly_budget > 0


# =============================================================================
# DERIVED STATE MODELS
# =============================================================================

class ExpenseStats(BaseModel):
    """Sum-based rollups over the full, unfiltered ledger."""

    total: Decimal = Decimal("0")
    this_month: Decimal = Decimal("0")
    last_7_days: Decimal = Decimal("0")
    today: Decimal = Decimal("0")


class BudgetEvaluation(BaseModel):
    """
    Result of evaluating this month's spend against the budget.

    percentage is the true, unclamped ratio. Use progress_width for
    drawing a progress bar.
    """

    status: BudgetStatus
    percentage: Decimal = Field(
        default=Decimal("0"),
        description="Spend as a percentage of the budget (unclamped)"
    )
    remaining: Decimal = Field(
        default=Decimal("0"),
        description="Budget minus spend, negative when exceeded"
    )
    monthly_budget: Decimal = Decimal("0")
    spent: Decimal = Decimal("0")

    @property
    def is_set(self) -> bool:
        return self.status != BudgetStatus.UNSET

    @property
    def progress_width(self) -> Decimal:
        """Percentage clamped to 100, for visual use only."""
        return min(self.percentage, Decimal("100"))

    @property
    def over_by(self) -> Decimal:
        """How far over budget, 0 unless exceeded."""
        if self.status == BudgetStatus.EXCEEDED:
            return abs(self.remaining)
        return Decimal("0")

    @property
    def display_remaining(self) -> Decimal:
        """The amount shown next to the status: over_by when exceeded, else remaining."""
        if self.status == BudgetStatus.EXCEEDED:
            return self.over_by
        return self.remaining


class DashboardView(BaseModel):
    """
    Everything the presentation layer needs after a user action.

    Built fresh from the ledger on every call; never stored.
    """

    records: list[ExpenseRecord] = Field(
        default_factory=list,
        description="Filtered and sorted records"
    )
    stats: ExpenseStats
    budget: BudgetEvaluation
    category_filter: Optional[ExpenseCategory] = None
    period_filter: PeriodFilter = PeriodFilter.ALL
    ledger_size: int = Field(
        default=0,
        ge=0,
        description="Number of records in the full ledger"
    )

    @property
    def is_empty(self) -> bool:
        """True when the filtered list has nothing to show."""
        return not self.records
