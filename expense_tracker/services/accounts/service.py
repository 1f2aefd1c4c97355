"""
Local Account Service

Signup and credential checks against the identity store.

NOTE: Login failures always produce the same message so the UI never
reveals whether the username or the password was wrong.
"""

from typing import Optional

import structlog

from expense_tracker.models.account import UserAccount
from expense_tracker.services.storage import AccountStorageInterface
from expense_tracker.validation import FormValidator, raise_for_errors


INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class AuthError(Exception):
    """Unknown user or wrong password."""

    def __init__(self, message: str = INVALID_CREDENTIALS_MESSAGE):
        super().__init__(message)


class AccountExistsError(Exception):
    """Signup with a username that is already taken."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists. Please choose another one.")


class AccountService:
    """
    Creates accounts and verifies credentials.

    Usernames are trimmed before use; passwords are compared exactly.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        validator: Optional[FormValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or FormValidator()
        self._logger = structlog.get_logger(__name__)

    def account_exists(self, username: str) -> bool:
        return self._storage.account_exists((username or "").strip())

    def verify_credentials(self, username: str, password: str) -> bool:
        account = self._storage.get_account((username or "").strip())
        return account is not None and account.password == password

    def signup(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> UserAccount:
        """
        Create a new account.

        Raises:
            ValidationError: If the form is invalid
            AccountExistsError: If the username is taken
            StorageError: If the account can't be saved
        """
        raise_for_errors(
            self._validator.validate_signup(username, email, password, confirm_password)
        )
        username = username.strip()

        if self._storage.account_exists(username):
            self._logger.info("signup_rejected", username=username, reason="exists")
            raise AccountExistsError(username)

        account = UserAccount(
            username=username,
            email=(email or "").strip(),
            password=password,
        )
        self._storage.save_account(account)
        self._logger.info("account_created", username=username)
        return account

    def authenticate(self, username: str, password: str) -> UserAccount:
        """
        Check credentials and return the account.

        Raises:
            ValidationError: If either field is empty
            AuthError: If the user is unknown or the password is wrong
        """
        raise_for_errors(self._validator.validate_login(username, password))
        account = self._storage.get_account(username.strip())
        if account is None or account.password != password:
            raise AuthError()
        return account
