"""
Statistics Aggregator

Sum-based rollups over the FULL ledger. The active list filter never
affects these figures.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from expense_tracker.ledger.filters import (
    is_this_month,
    is_today,
    is_within_rolling_week,
)
from expense_tracker.models.expense import ExpenseRecord, ExpenseStats


CENTS = Decimal("0.01")


def compute_stats(
    records: Iterable[ExpenseRecord],
    now: Optional[datetime] = None,
) -> ExpenseStats:
    """Total, this month, last 7 days (rolling) and today. All 0 when empty."""
    now = now or datetime.now()

    total = Decimal("0")
    this_month = Decimal("0")
    last_7_days = Decimal("0")
    today = Decimal("0")

    for record in records:
        total += record.amount
        if is_this_month(record, now):
            this_month += record.amount
        if is_within_rolling_week(record, now):
            last_7_days += record.amount
        if is_today(record, now):
            today += record.amount

    return ExpenseStats(
        total=total,
        this_month=this_month,
        last_7_days=last_7_days,
        today=today,
    )


def round_money(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """'12.5' -> '12.50'"""
    return f"{round_money(amount):.2f}"


def format_money(amount: Decimal, currency_symbol: str = "K") -> str:
    """'12.5' -> 'K 12.50'"""
    if not currency_symbol:
        return format_amount(amount)
    return f"{currency_symbol} {format_amount(amount)}"
