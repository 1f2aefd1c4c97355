"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    BudgetEvaluation,
    BudgetStatus,
    DashboardView,
    ExpenseCategory,
    ExpenseRecord,
    ExpenseStats,
    LedgerState,
    NewExpense,
    PeriodFilter,
)
from expense_tracker.models.account import UserAccount
from expense_tracker.models.validation import ValidationIssue, ValidationResult
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "BudgetEvaluation",
    "BudgetStatus",
    "DashboardView",
    "ExpenseCategory",
    "ExpenseRecord",
    "ExpenseStats",
    "LedgerState",
    "NewExpense",
    "PeriodFilter",
    # Account models
    "UserAccount",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
