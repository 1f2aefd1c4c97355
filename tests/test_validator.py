"""Tests for form validation."""

import pytest
from datetime import date
from decimal import Decimal

from expense_tracker.models.expense import ExpenseCategory
from expense_tracker.validation import (
    FormValidator,
    ValidationError,
    parse_decimal,
    raise_for_errors,
)


TODAY = date(2024, 1, 15)


class TestParseDecimal:
    """Tests for parse_decimal."""

    def test_valid_inputs(self):
        """Test strings, ints, floats and Decimals."""
        assert parse_decimal("12.50") == Decimal("12.50")
        assert parse_decimal(" 3 ") == Decimal("3")
        assert parse_decimal(7) == Decimal("7")
        assert parse_decimal(2.5) == Decimal("2.5")
        assert parse_decimal(Decimal("1")) == Decimal("1")

    def test_invalid_inputs(self):
        """Test that garbage, booleans and infinities give None."""
        assert parse_decimal("abc") is None
        assert parse_decimal("") is None
        assert parse_decimal(None) is None
        assert parse_decimal(True) is None
        assert parse_decimal("Infinity") is None
        assert parse_decimal("NaN") is None


class TestSignupValidation:
    """Tests for validate_signup."""

    def test_valid_signup(self):
        """Test a clean signup form."""
        result = FormValidator().validate_signup("alice", "a@b.c", "secret1", "secret1")
        assert result.is_valid is True
        assert result.warnings == []

    def test_short_username(self):
        """Test the minimum username length."""
        result = FormValidator().validate_signup("al", "", "secret1", "secret1")
        assert result.first_error_message == "Username must be at least 3 characters long"

    def test_username_trimmed_before_length_check(self):
        """Test that padding doesn't count towards the length."""
        result = FormValidator().validate_signup("  al  ", "", "secret1", "secret1")
        assert result.has_errors is True

    def test_short_password(self):
        """Test the minimum password length."""
        result = FormValidator().validate_signup("alice", "", "12345", "12345")
        assert result.first_error_message == "Password must be at least 6 characters long"

    def test_password_mismatch(self):
        """Test confirm password must match."""
        result = FormValidator().validate_signup("alice", "", "secret1", "secret2")
        assert [i.message for i in result.errors] == ["Passwords do not match"]

    def test_all_errors_reported(self):
        """Test that every problem is listed, not just the first."""
        result = FormValidator().validate_signup("a", "", "1", "2")
        assert result.error_count == 3

    def test_email_without_at_is_warning(self):
        """Test an odd email only warns."""
        result = FormValidator().validate_signup("alice", "alice", "secret1", "secret1")
        assert result.is_valid is True
        assert result.warnings == ["Email address looks incomplete"]

    def test_length_rules_from_settings(self, monkeypatch):
        """Test that the minimums come from configuration."""
        monkeypatch.setenv("MIN_PASSWORD_LENGTH", "10")
        result = FormValidator().validate_signup("alice", "", "secret1", "secret1")
        assert result.first_error_message == "Password must be at least 10 characters long"


class TestLoginValidation:
    """Tests for validate_login."""

    @pytest.mark.parametrize("username,password", [
        ("", "secret1"),
        ("alice", ""),
        ("   ", "secret1"),
        (None, None),
    ])
    def test_missing_fields(self, username, password):
        """Test that both fields are required."""
        result = FormValidator().validate_login(username, password)
        assert result.first_error_message == "Please enter both username and password"

    def test_present_fields(self):
        """Test a filled-in login form."""
        assert FormValidator().validate_login("alice", "x").is_valid is True


class TestBudgetValidation:
    """Tests for validate_budget."""

    @pytest.mark.parametrize("amount", ["0", "-10", "abc", "", None])
    def test_rejected(self, amount):
        """Test zero, negative and non-numeric budgets."""
        result, parsed = FormValidator().validate_budget(amount)
        assert parsed is None
        assert result.first_error_message == "Please enter a budget greater than zero"

    def test_accepted(self):
        """Test a positive budget."""
        result, parsed = FormValidator().validate_budget("1000.50")
        assert result.is_valid is True
        assert parsed == Decimal("1000.50")


class TestExpenseValidation:
    """Tests for validate_expense."""

    def test_valid_expense(self):
        """Test a clean expense form."""
        result, expense = FormValidator().validate_expense(
            name=" Coffee ",
            amount="12.50",
            category="Food",
            expense_date=date(2024, 1, 14),
            notes="",
            today=TODAY,
        )

        assert result.is_valid is True
        assert result.warnings == []
        assert expense.name == "Coffee"
        assert expense.category == ExpenseCategory.FOOD
        assert expense.notes is None

    def test_invalid_amount(self):
        """Test a non-numeric amount."""
        result, expense = FormValidator().validate_expense(
            name="Coffee",
            amount="twelve",
            category="Food",
            expense_date=TODAY,
            today=TODAY,
        )

        assert expense is None
        assert result.first_error_message == "Please enter a valid amount"

    def test_negative_amount(self):
        """Test that negative amounts are refused."""
        result, expense = FormValidator().validate_expense(
            name="Coffee",
            amount="-1",
            category="Food",
            expense_date=TODAY,
            today=TODAY,
        )

        assert expense is None
        assert result.errors[0].field == "amount"

    def test_missing_fields(self):
        """Test that name, category and date are required."""
        result, expense = FormValidator().validate_expense(
            name="   ",
            amount="5",
            category=None,
            expense_date=None,
            today=TODAY,
        )

        assert expense is None
        assert {i.field for i in result.errors} == {"name", "category", "date"}

    def test_unknown_category(self):
        """Test that only known categories are allowed."""
        result, _ = FormValidator().validate_expense(
            name="Coffee",
            amount="5",
            category="Snacks",
            expense_date=TODAY,
            today=TODAY,
        )

        assert result.errors[0].field == "category"

    def test_future_date_warns(self):
        """Test that a future date is allowed with a warning."""
        result, expense = FormValidator().validate_expense(
            name="Concert",
            amount="50",
            category=ExpenseCategory.ENTERTAINMENT,
            expense_date=date(2024, 2, 1),
            today=TODAY,
        )

        assert expense is not None
        assert result.is_valid is True
        assert result.warnings == ["Expense date (2024-02-01) is in the future"]

    def test_zero_amount_warns(self):
        """Test that a zero amount is allowed with a warning."""
        result, expense = FormValidator().validate_expense(
            name="Free sample",
            amount="0",
            category="Other",
            expense_date=TODAY,
            today=TODAY,
        )

        assert expense.amount == Decimal("0")
        assert result.warnings == ["Amount is zero"]


class TestRaiseForErrors:
    """Tests for raise_for_errors and the summary text."""

    def test_raises_with_first_message(self):
        """Test that errors raise ValidationError."""
        result = FormValidator().validate_login("", "")
        with pytest.raises(ValidationError, match="Please enter both"):
            raise_for_errors(result)

    def test_passes_through_valid(self):
        """Test that valid results are returned."""
        result = FormValidator().validate_login("alice", "x")
        assert raise_for_errors(result) is result

    def test_summary(self):
        """Test the readable summary."""
        validator = FormValidator()
        result = validator.validate_signup("alice", "alice", "1", "1")

        summary = validator.get_user_friendly_summary(result)

        assert "Please fix the following:" in summary
        assert "Password must be at least 6 characters long" in summary
        assert "Email address looks incomplete" in summary

    def test_summary_all_clear(self):
        """Test the summary for a clean form."""
        validator = FormValidator()
        result = validator.validate_login("alice", "x")
        assert validator.get_user_friendly_summary(result) == "All checks passed."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
