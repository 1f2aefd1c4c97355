"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Accounts (signup → login → restore → logout)
2. Ledger changes (validate → mutate in memory → persist → audit)
3. Derived views (filter + stats + budget) and CSV export

DESIGN DECISION: All per-user state lives on an explicit ExpenseSession
object. Login loads a fresh ledger, logout discards it. Nothing is kept
in module-level globals.

DESIGN DECISION: The session never calls into the UI. After any action
the UI pulls a DashboardView, which is rebuilt from the ledger each time.

PERSISTENCE RULES:
- Every mutation is written to storage before the call returns
- If the write fails, the in-memory change STANDS, the failure is
  audited, and the StorageError is raised to the caller. No retry.
- Records and budget load separately; a part that fails to load falls
  back to its default (no records, budget 0) and the other part is kept
- A record list that failed to load is never written over
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional, Union

import structlog

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.config import get_settings
from expense_tracker.ledger import (
    EmptyExportError,
    Ledger,
    compute_stats,
    evaluate_budget,
    export_filename,
    filter_expenses,
    generate_csv,
)
from expense_tracker.models.account import UserAccount
from expense_tracker.models.expense import (
    DashboardView,
    ExpenseCategory,
    ExpenseRecord,
    LedgerState,
    NewExpense,
    PeriodFilter,
)
from expense_tracker.models.validation import ValidationResult
from expense_tracker.services.accounts import AccountService, AuthError
from expense_tracker.services.storage import (
    InMemoryKeyValueStore,
    KeyValueAccountStorage,
    KeyValueAuditStorage,
    KeyValueLedgerStorage,
    KeyValueSessionMarker,
    KeyValueStoreInterface,
    LedgerStorageInterface,
    LocalKeyValueStore,
    SessionMarkerInterface,
    StorageError,
)
from expense_tracker.validation import FormValidator, raise_for_errors


class NoActiveSessionError(Exception):
    """A ledger operation was attempted while nobody is logged in."""

    def __init__(self):
        super().__init__("Please sign in first")


class UnreadableRecordsError(StorageError):
    """The stored expense list couldn't be read at login, so it is left untouched."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(
            "Your saved expenses could not be read, so they were not overwritten"
        )


class ExpenseSession:
    """
    The active user's session.

    Holds the logged-in username and their Ledger, and routes every
    change through validation, persistence and audit logging.
    """

    def __init__(
        self,
        accounts: AccountService,
        ledger_storage: LedgerStorageInterface,
        session_marker: SessionMarkerInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[FormValidator] = None,
    ):
        self._accounts = accounts
        self._ledger_storage = ledger_storage
        self._session_marker = session_marker
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or FormValidator()
        self._settings = get_settings().app
        self._logger = structlog.get_logger(__name__)

        self._username: Optional[str] = None
        self._ledger: Optional[Ledger] = None
        self._load_error: Optional[str] = None
        self._records_unreadable = False

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def is_authenticated(self) -> bool:
        return self._username is not None

    @property
    def ledger(self) -> Ledger:
        if self._ledger is None:
            raise NoActiveSessionError()
        return self._ledger

    @property
    def load_error(self) -> Optional[str]:
        """Why part of the last load fell back to a default, if it did."""
        return self._load_error

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def validator(self) -> FormValidator:
        return self._validator

    @property
    def debug_mode(self) -> bool:
        return self._settings.debug_mode

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def signup(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> UserAccount:
        """
        Create an account. Does not log the user in.

        Raises:
            ValidationError, AccountExistsError, StorageError
        """
        account = self._accounts.signup(username, email, password, confirm_password)
        self._audit_logger.log_account_created(account.username)
        return account

    def login(self, username: str, password: str) -> Ledger:
        """
        Check credentials, then load the user's ledger.

        Raises:
            ValidationError: If a field is empty
            AuthError: If the credentials are wrong
        """
        try:
            account = self._accounts.authenticate(username, password)
        except AuthError:
            self._audit_logger.log_login_failed((username or "").strip())
            raise

        ledger = self._open(account.username)
        self._audit_logger.log_login_succeeded(account.username)

        try:
            self._session_marker.set_active_user(account.username)
        except StorageError as e:
            # The session still works; it just won't survive a restart
            self._logger.warning(
                "session_marker_write_failed",
                username=account.username,
                error=str(e),
            )
        return ledger

    def restore(self) -> Optional[str]:
        """
        Resume the session recorded by the session marker, if any.

        Returns:
            The restored username, or None
        """
        try:
            username = self._session_marker.get_active_user()
            known = bool(username) and self._accounts.account_exists(username)
        except StorageError as e:
            self._logger.warning("session_marker_read_failed", error=str(e))
            return None

        if not username:
            return None

        if not known:
            self._logger.warning("session_marker_stale", username=username)
            try:
                self._session_marker.clear_active_user()
            except StorageError as e:
                self._logger.warning("session_marker_clear_failed", error=str(e))
            return None

        self._open(username)
        self._audit_logger.log_session_restored(username)
        return username

    def logout(self) -> None:
        """Discard the in-memory ledger. Stored data is kept."""
        username = self._username
        self._username = None
        self._ledger = None
        self._load_error = None
        self._records_unreadable = False

        try:
            self._session_marker.clear_active_user()
        except StorageError as e:
            self._logger.warning("session_marker_clear_failed", error=str(e))

        if username:
            self._audit_logger.log_logout(username)

    def _open(self, username: str) -> Ledger:
        """
        Swap in the user's ledger wholesale.

        Records and budget load independently. An unreadable budget falls
        back to 0 and keeps the records; unreadable records fall back to an
        empty list and are marked so they are never overwritten.
        """
        errors = []

        try:
            records = self._ledger_storage.load_records(username)
            self._records_unreadable = False
        except StorageError as e:
            errors.append(str(e))
            self._audit_logger.log_load_failed(username, str(e))
            records = []
            self._records_unreadable = True

        try:
            budget = self._ledger_storage.load_budget(username)
        except StorageError as e:
            errors.append(str(e))
            self._audit_logger.log_load_failed(username, str(e))
            budget = Decimal("0")

        state = LedgerState(user_id=username, records=records, monthly_budget=budget)
        self._load_error = "; ".join(errors) or None
        self._username = username
        self._ledger = Ledger(state)
        self._audit_logger.log_ledger_loaded(
            username, len(state.records), state.monthly_budget
        )
        return self._ledger

    # -------------------------------------------------------------------------
    # Ledger mutations
    # -------------------------------------------------------------------------

    def _persist(
        self,
        operation: str,
        save: Callable[[LedgerState], None],
        writes_records: bool = False,
    ) -> None:
        """
        Write the current ledger state.

        On failure the in-memory state is left as is and the error is raised.
        Records that failed to load are never written over.
        """
        ledger = self.ledger
        try:
            if writes_records and self._records_unreadable:
                raise UnreadableRecordsError(ledger.user_id)
            save(ledger.state)
        except StorageError as e:
            self._audit_logger.log_save_failed(ledger.user_id, operation, str(e))
            raise

    def add_expense(
        self,
        expense: NewExpense,
        created_at: Optional[datetime] = None,
    ) -> ExpenseRecord:
        """
        Add a validated expense to the ledger and persist it.

        Raises:
            NoActiveSessionError: If nobody is logged in
            StorageError: If persisting fails (the record is still added)
        """
        ledger = self.ledger
        record = ExpenseRecord.from_new_expense(
            expense,
            record_id=ledger.next_id(),
            created_at=created_at,
        )
        ledger.add(record)
        self._audit_logger.log_expense_added(
            username=ledger.user_id,
            expense_id=record.id,
            name=record.name,
            amount=record.amount,
            category=record.category.value,
        )
        self._persist("add_expense", self._ledger_storage.save_records, writes_records=True)
        return record

    def submit_expense(
        self,
        name: str,
        amount: Union[str, int, float, Decimal, None],
        category: Union[str, ExpenseCategory, None],
        expense_date: Optional[date],
        notes: Optional[str] = None,
    ) -> tuple[ExpenseRecord, ValidationResult]:
        """
        Validate raw form input, then add it.

        Returns:
            (record, validation_result). The result may carry warnings.

        Raises:
            ValidationError: If the form has errors (nothing is added)
        """
        if not self.is_authenticated:
            raise NoActiveSessionError()
        result, expense = self._validator.validate_expense(
            name=name,
            amount=amount,
            category=category,
            expense_date=expense_date,
            notes=notes,
        )
        raise_for_errors(result)
        return self.add_expense(expense), result

    def delete_expense(self, expense_id: int) -> bool:
        """
        Remove an expense. Deleting an id that's already gone is a no-op.

        Returns:
            True if a record was removed

        Raises:
            StorageError: If persisting fails (the record stays removed)
        """
        ledger = self.ledger
        found = expense_id in ledger
        ledger.remove(expense_id)
        self._audit_logger.log_expense_deleted(ledger.user_id, expense_id, found)
        self._persist("delete_expense", self._ledger_storage.save_records, writes_records=True)
        return found

    def set_budget(self, amount: Union[str, int, float, Decimal, None]) -> Decimal:
        """
        Set the monthly budget.

        Raises:
            ValidationError: If the amount isn't a positive number
            StorageError: If persisting fails (the new budget still applies)
        """
        ledger = self.ledger
        result, parsed = self._validator.validate_budget(amount)
        raise_for_errors(result)

        previous = ledger.monthly_budget
        ledger.set_monthly_budget(parsed)
        self._audit_logger.log_budget_set(ledger.user_id, previous, parsed)
        self._persist("set_budget", self._ledger_storage.save_budget)
        return parsed

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def dashboard(
        self,
        category: Optional[ExpenseCategory] = None,
        period: PeriodFilter = PeriodFilter.ALL,
        now: Optional[datetime] = None,
    ) -> DashboardView:
        """
        Everything the UI needs, recomputed from the current ledger.

        The filtered list honours category and period; stats and budget
        always cover the whole ledger.
        """
        now = now or datetime.now()
        records = self.ledger.records
        stats = compute_stats(records, now=now)
        budget = evaluate_budget(
            self.ledger.monthly_budget,
            stats.this_month,
            warning_percent=self._settings.budget_warning_percent,
        )
        return DashboardView(
            records=filter_expenses(records, category=category, period=period, now=now),
            stats=stats,
            budget=budget,
            category_filter=category,
            period_filter=period,
            ledger_size=len(records),
        )

    def export_csv(
        self,
        category: Optional[ExpenseCategory] = None,
        period: PeriodFilter = PeriodFilter.ALL,
        now: Optional[datetime] = None,
    ) -> tuple[str, str]:
        """
        Export the currently filtered list.

        Returns:
            (filename, csv_text)

        Raises:
            EmptyExportError: If the ledger has no expenses at all
        """
        now = now or datetime.now()
        ledger = self.ledger
        records = ledger.records
        filtered = filter_expenses(records, category=category, period=period, now=now)

        try:
            payload = generate_csv(filtered, records)
        except EmptyExportError:
            self._audit_logger.log_export_blocked(ledger.user_id)
            raise

        filename = export_filename(self._settings.app_name, ledger.user_id, now.date())
        self._audit_logger.log_export_generated(ledger.user_id, filename, len(filtered))
        return filename, payload


def create_app_components(
    store: Optional[KeyValueStoreInterface] = None,
    use_storage: bool = True,
) -> ExpenseSession:
    """
    Factory function to create a ready-to-use session.

    Args:
        store: Key-value backend to use. Defaults to the local JSON file
               from StorageSettings.
        use_storage: Set to False to keep everything in memory.

    Returns:
        A logged-out ExpenseSession
    """
    app_settings = get_settings().app
    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    if store is None:
        store = LocalKeyValueStore() if use_storage else InMemoryKeyValueStore()

    accounts = AccountService(KeyValueAccountStorage(store))
    audit_logger = AuditLogger(KeyValueAuditStorage(store))

    return ExpenseSession(
        accounts=accounts,
        ledger_storage=KeyValueLedgerStorage(store),
        session_marker=KeyValueSessionMarker(store),
        audit_logger=audit_logger,
    )
