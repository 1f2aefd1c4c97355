"""Tests for the statistics aggregator and money formatting."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from expense_tracker.ledger import (
    compute_stats,
    format_amount,
    format_money,
    round_money,
)

from conftest import make_record


NOW = datetime(2024, 1, 15, 9, 0)


class TestComputeStats:
    """Tests for compute_stats."""

    def test_empty_ledger_is_all_zero(self):
        """Test that no records gives zeros everywhere."""
        stats = compute_stats([], now=NOW)

        assert stats.total == Decimal("0")
        assert stats.this_month == Decimal("0")
        assert stats.last_7_days == Decimal("0")
        assert stats.today == Decimal("0")

    def test_total_is_exact_sum(self):
        """Test that total equals the sum of every amount."""
        amounts = ["0.10", "0.20", "12.50", "99.99", "1000"]
        records = [
            make_record(i, date(2020 + i, 1, 1), amount=a)
            for i, a in enumerate(amounts)
        ]

        stats = compute_stats(records, now=NOW)

        assert stats.total == Decimal("1112.79")

    def test_windows(self):
        """Test each rollup picks the right records."""
        records = [
            make_record(1, date(2024, 1, 15), amount="5"),    # today
            make_record(2, date(2024, 1, 10), amount="10"),   # this week
            make_record(3, date(2024, 1, 2), amount="20"),    # this month
            make_record(4, date(2023, 12, 30), amount="40"),  # last month
        ]

        stats = compute_stats(records, now=NOW)

        assert stats.total == Decimal("75")
        assert stats.this_month == Decimal("35")
        assert stats.last_7_days == Decimal("15")
        assert stats.today == Decimal("5")

    def test_rolling_week_crosses_month_boundary(self):
        """Test that last 7 days can include last month's records."""
        now = datetime(2024, 2, 2, 10, 0)
        records = [
            make_record(1, date(2024, 1, 30), amount="7"),
            make_record(2, date(2024, 2, 1), amount="3"),
        ]

        stats = compute_stats(records, now=now)

        assert stats.last_7_days == Decimal("10")
        assert stats.this_month == Decimal("3")

    def test_negative_amounts_are_summed(self):
        """Test that negative stored amounts don't break the sums."""
        records = [
            make_record(1, date(2024, 1, 15), amount="10"),
            make_record(2, date(2024, 1, 15), amount="-4"),
        ]

        assert compute_stats(records, now=NOW).today == Decimal("6")


class TestMoneyFormatting:
    """Tests for amount rounding and display."""

    def test_round_half_up(self):
        """Test that halves round away from zero."""
        assert round_money(Decimal("0.125")) == Decimal("0.13")
        assert round_money(Decimal("2.675")) == Decimal("2.68")

    def test_format_amount_two_places(self):
        """Test two decimal places."""
        assert format_amount(Decimal("12.5")) == "12.50"
        assert format_amount(Decimal("3")) == "3.00"

    def test_format_money_with_symbol(self):
        """Test the currency prefix."""
        assert format_money(Decimal("1234.5")) == "K 1234.50"
        assert format_money(Decimal("1"), "$") == "$ 1.00"

    def test_format_money_without_symbol(self):
        """Test an empty symbol gives the bare amount."""
        assert format_money(Decimal("7"), "") == "7.00"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
