"""Form validation package."""

from expense_tracker.validation.validator import (
    FormValidator,
    ValidationError,
    parse_decimal,
    raise_for_errors,
)

__all__ = ["FormValidator", "ValidationError", "parse_decimal", "raise_for_errors"]
