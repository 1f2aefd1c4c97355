"""
Form Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Lengths, types, number formats
- This catches malformed form input

STAGE 2 - SEMANTIC VALIDATION (expenses only):
- Future date detection
- Zero amount detection
- These are warnings; they never block a save

IMPORTANT: Validation NEVER silently fixes issues beyond trimming
whitespace from names. It reports them for the user to correct.
A failed validation means no state was changed.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from expense_tracker.config import get_settings
from expense_tracker.models.expense import ExpenseCategory, NewExpense
from expense_tracker.models.validation import ValidationIssue, ValidationResult


class ValidationError(Exception):
    """Form input was rejected. Carries the full ValidationResult."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.first_error_message or "Invalid input")


def raise_for_errors(result: ValidationResult) -> ValidationResult:
    """Raise ValidationError if result has errors, else return it."""
    if result.has_errors:
        raise ValidationError(result)
    return result


def parse_decimal(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """Parse user input into a finite Decimal, or None if it isn't one."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


class FormValidator:
    """
    Validates signup, login, budget and expense forms.

    Length rules come from AppSettings so they can be tuned per deployment.
    """

    def __init__(self):
        self._settings = get_settings().app

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def validate_signup(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> ValidationResult:
        issues = []
        username = (username or "").strip()
        min_user = self._settings.min_username_length
        min_pass = self._settings.min_password_length

        if len(username) < min_user:
            issues.append(ValidationIssue(
                field="username",
                issue_type="too_short",
                message=f"Username must be at least {min_user} characters long",
                severity="error",
            ))

        if len(password or "") < min_pass:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {min_pass} characters long",
                severity="error",
            ))

        if (password or "") != (confirm_password or ""):
            issues.append(ValidationIssue(
                field="confirm_password",
                issue_type="mismatch",
                message="Passwords do not match",
                severity="error",
                suggested_fix="Type the same password in both fields",
            ))

        if email and "@" not in email:
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Email address looks incomplete",
                severity="warning",
            ))

        return ValidationResult(form="signup", issues=issues)

    def validate_login(self, username: str, password: str) -> ValidationResult:
        issues = []
        if not (username or "").strip() or not password:
            issues.append(ValidationIssue(
                field="credentials",
                issue_type="missing",
                message="Please enter both username and password",
                severity="error",
            ))
        return ValidationResult(form="login", issues=issues)

    # -------------------------------------------------------------------------
    # Budget
    # -------------------------------------------------------------------------

    def validate_budget(
        self,
        amount: Union[str, int, float, Decimal, None],
    ) -> tuple[ValidationResult, Optional[Decimal]]:
        """
        Returns:
            (result, parsed_amount). parsed_amount is None when invalid.
        """
        parsed = parse_decimal(amount)
        if parsed is None or parsed <= 0:
            issue = ValidationIssue(
                field="monthly_budget",
                issue_type="invalid_value",
                message="Please enter a budget greater than zero",
                severity="error",
            )
            return ValidationResult(form="budget", issues=[issue]), None
        return ValidationResult(form="budget"), parsed

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def _validate_expense_schema(
        self,
        data: dict[str, Any],
    ) -> tuple[Optional[NewExpense], list[ValidationIssue]]:
        """
        Stage 1: build a NewExpense, turning pydantic errors into issues.
        """
        try:
            return NewExpense.model_validate(data), []
        except PydanticValidationError as e:
            issues = []
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "expense"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type=error["type"],
                    message=f"{field.replace('_', ' ').capitalize()}: {error['msg']}",
                    severity="error",
                ))
            return None, issues

    def _validate_expense_semantic(
        self,
        expense: NewExpense,
        today: date,
    ) -> list[ValidationIssue]:
        """
        Stage 2: warnings about unusual but allowed values.
        """
        issues = []

        if expense.date > today:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Expense date ({expense.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        if expense.amount == 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Amount is zero",
                severity="warning",
                suggested_fix="Please verify the amount",
            ))

        return issues

    def validate_expense(
        self,
        name: str,
        amount: Union[str, int, float, Decimal, None],
        category: Union[str, ExpenseCategory, None],
        expense_date: Optional[date],
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[ValidationResult, Optional[NewExpense]]:
        """
        Run both stages on an add-expense submission.

        Returns:
            (result, expense). expense is None when there are errors.
        """
        issues = []

        parsed_amount = parse_decimal(amount)
        if parsed_amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Please enter a valid amount",
                severity="error",
            ))
            return ValidationResult(form="expense", issues=issues), None

        expense, schema_issues = self._validate_expense_schema({
            "name": name,
            "amount": parsed_amount,
            "category": category,
            "date": expense_date,
            "notes": notes,
        })
        issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        if expense is not None:
            issues.extend(
                self._validate_expense_semantic(expense, today or date.today())
            )

        return ValidationResult(form="expense", issues=issues), expense

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
