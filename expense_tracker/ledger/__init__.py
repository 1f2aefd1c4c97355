"""Expense ledger and budget-evaluation engine."""

from expense_tracker.ledger.budget import (
    BudgetMessage,
    budget_message,
    evaluate_budget,
    format_percentage,
)
from expense_tracker.ledger.export import (
    CSV_HEADER,
    EmptyExportError,
    export_filename,
    generate_csv,
)
from expense_tracker.ledger.filters import filter_expenses, matches_period
from expense_tracker.ledger.ledger import (
    DuplicateExpenseError,
    Ledger,
    LedgerError,
)
from expense_tracker.ledger.statistics import (
    compute_stats,
    format_amount,
    format_money,
    round_money,
)

__all__ = [
    "BudgetMessage",
    "CSV_HEADER",
    "DuplicateExpenseError",
    "EmptyExportError",
    "Ledger",
    "LedgerError",
    "budget_message",
    "compute_stats",
    "evaluate_budget",
    "export_filename",
    "filter_expenses",
    "format_amount",
    "format_money",
    "format_percentage",
    "generate_csv",
    "matches_period",
    "round_money",
]
