"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of every change to a ledger
2. Debugging capability when storage fails
3. A per-user history the UI can show

The audit logger:
- Always writes a structured local log line
- Gracefully handles failures (never crashes the app if logging fails)
- Optionally persists events through an AuditStorageInterface
"""

import logging
from decimal import Decimal
from typing import Optional

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder
from expense_tracker.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog for local JSON logging.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, username: str, limit: int = 50) -> list[AuditEvent]:
        """Newest-first events for a user; empty without storage or on failure."""
        if not self._storage:
            return []
        try:
            return self._storage.get_recent_events(username, limit=limit)
        except Exception as e:
            self._logger.error("audit_read_failed", error=str(e), username=username)
            return []

    def log_account_created(self, username: str) -> None:
        self.log(AuditEventBuilder.account_created(username))

    def log_login_succeeded(self, username: str) -> None:
        self.log(AuditEventBuilder.login_succeeded(username))

    def log_login_failed(self, username: str) -> None:
        self.log(AuditEventBuilder.login_failed(username))

    def log_logout(self, username: str) -> None:
        self.log(AuditEventBuilder.logout(username))

    def log_session_restored(self, username: str) -> None:
        self.log(AuditEventBuilder.session_restored(username))

    def log_ledger_loaded(
        self,
        username: str,
        record_count: int,
        monthly_budget: Decimal,
    ) -> None:
        self.log(AuditEventBuilder.ledger_loaded(username, record_count, monthly_budget))

    def log_expense_added(
        self,
        username: str,
        expense_id: int,
        name: str,
        amount: Decimal,
        category: str,
    ) -> None:
        """Log an expense joining the ledger."""
        self.log(AuditEventBuilder.expense_added(
            username=username,
            expense_id=expense_id,
            name=name,
            amount=amount,
            category=category,
        ))

    def log_expense_deleted(self, username: str, expense_id: int, found: bool) -> None:
        self.log(AuditEventBuilder.expense_deleted(username, expense_id, found))

    def log_budget_set(self, username: str, previous: Decimal, new: Decimal) -> None:
        self.log(AuditEventBuilder.budget_set(username, previous, new))

    def log_export_generated(self, username: str, filename: str, row_count: int) -> None:
        self.log(AuditEventBuilder.export_generated(username, filename, row_count))

    def log_export_blocked(self, username: str) -> None:
        self.log(AuditEventBuilder.export_blocked(username))

    def log_load_failed(self, username: str, error_message: str) -> None:
        self.log(AuditEventBuilder.load_failed(username, error_message))

    def log_save_failed(self, username: str, operation: str, error_message: str) -> None:
        """Log a persistence failure. The in-memory change still stands."""
        self.log(AuditEventBuilder.save_failed(username, operation, error_message))
