"""Local account services."""

from expense_tracker.services.accounts.service import (
    INVALID_CREDENTIALS_MESSAGE,
    AccountExistsError,
    AccountService,
    AuthError,
)

__all__ = [
    "INVALID_CREDENTIALS_MESSAGE",
    "AccountExistsError",
    "AccountService",
    "AuthError",
]
