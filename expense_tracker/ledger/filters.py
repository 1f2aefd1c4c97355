"""
Filter Engine

Derives the visible expense list from the full ledger: category match,
then period window, then newest date first.

Period semantics:
- today:      record date == today's calendar date
- last7days:  record date (taken at midnight) >= now - 168 hours
- thisMonth:  same calendar month and year as now

NOTE: last7days is an exact rolling window, not "the last 7 calendar days".
A record dated 8 days ago drops out as soon as now passes midnight + 168h.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from expense_tracker.models.expense import (
    ExpenseCategory,
    ExpenseRecord,
    PeriodFilter,
)


ROLLING_WINDOW = timedelta(hours=7 * 24)


def _start_of_day(day: date, now: datetime) -> datetime:
    """Midnight of day, in the same timezone (or lack of one) as now."""
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)


def is_today(record: ExpenseRecord, now: datetime) -> bool:
    return record.date == now.date()


def is_within_rolling_week(record: ExpenseRecord, now: datetime) -> bool:
    return _start_of_day(record.date, now) >= now - ROLLING_WINDOW


def is_this_month(record: ExpenseRecord, now: datetime) -> bool:
    return record.date.year == now.year and record.date.month == now.month


_PERIOD_PREDICATES = {
    PeriodFilter.TODAY: is_today,
    PeriodFilter.LAST_7_DAYS: is_within_rolling_week,
    PeriodFilter.THIS_MONTH: is_this_month,
}


def matches_period(
    record: ExpenseRecord,
    period: PeriodFilter,
    now: datetime,
) -> bool:
    """True if the record falls inside the period. ALL matches everything."""
    predicate = _PERIOD_PREDICATES.get(PeriodFilter(period))
    if predicate is None:
        return True
    return predicate(record, now)


def filter_expenses(
    records: Iterable[ExpenseRecord],
    category: Optional[ExpenseCategory] = None,
    period: PeriodFilter = PeriodFilter.ALL,
    now: Optional[datetime] = None,
) -> list[ExpenseRecord]:
    """
    Apply the category and period criteria and sort newest first.

    Args:
        records: The full ledger, in insertion order
        category: Exact category to keep. None or "" keeps all categories
        period: Time window to keep
        now: Reference time (defaults to local now)

    Returns:
        A new list. Records with the same date keep their insertion
        order (the sort is stable). May be empty.
    """
    now = now or datetime.now()

    filtered = list(records)

    if category:
        category = ExpenseCategory(category)
        filtered = [r for r in filtered if r.category == category]

    if period != PeriodFilter.ALL:
        filtered = [r for r in filtered if matches_period(r, period, now)]

    return sorted(filtered, key=lambda r: r.date, reverse=True)
