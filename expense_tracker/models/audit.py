"""
Audit Models for Expense Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. A history of what the user did to their ledger
2. Debugging information when storage misbehaves
3. Ability to reconstruct how a balance came to be

DESIGN DECISION: Audit logs are append-only. We never modify events;
the stored log is only trimmed to its configured maximum length.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_CREATED = "account_created"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    SESSION_RESTORED = "session_restored"

    # Ledger
    LEDGER_LOADED = "ledger_loaded"
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    BUDGET_SET = "budget_set"

    # Export
    EXPORT_GENERATED = "export_generated"
    EXPORT_BLOCKED = "export_blocked"

    # Storage
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who and what is this about?
    username: Optional[str] = Field(
        default=None,
        description="User the event belongs to"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Expense id the event relates to, if any"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "username": self.username,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_storage_dict(self) -> dict:
        """Convert to a JSON-safe dict for the key-value store."""
        return self.model_dump(mode="json")


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(username, expense_id, name, amount)
        event = AuditEventBuilder.logout(username)
    """

    @staticmethod
    def account_created(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            username=username,
            description=f"Account created: {username}",
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            username=username,
            description=f"User logged in: {username}",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str) -> AuditEvent:
        # Never record which of username/password was wrong
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            username=username,
            description="Login failed: invalid username or password",
            is_user_action=True,
        )

    @staticmethod
    def logout(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            username=username,
            description=f"User logged out: {username}",
            is_user_action=True,
        )

    @staticmethod
    def session_restored(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            username=username,
            description=f"Session restored for {username}",
        )

    @staticmethod
    def ledger_loaded(username: str, record_count: int, monthly_budget: Decimal) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            username=username,
            description=f"Ledger loaded with {record_count} records",
            details={
                "record_count": record_count,
                "monthly_budget": str(monthly_budget),
            },
        )

    @staticmethod
    def expense_added(
        username: str,
        expense_id: int,
        name: str,
        amount: Decimal,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            username=username,
            entity_id=expense_id,
            description=f"Expense added: {name} - {amount}",
            details={
                "name": name,
                "amount": str(amount),
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(username: str, expense_id: int, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            username=username,
            entity_id=expense_id,
            description=(
                f"Expense deleted: {expense_id}"
                if found
                else f"Expense already gone: {expense_id}"
            ),
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def budget_set(username: str, previous: Decimal, new: Decimal) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            username=username,
            description=f"Monthly budget set to {new}",
            details={
                "previous": str(previous),
                "new": str(new),
            },
            is_user_action=True,
        )

    @staticmethod
    def export_generated(username: str, filename: str, row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            username=username,
            description=f"Exported {row_count} expenses to {filename}",
            details={
                "filename": filename,
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_blocked(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_BLOCKED,
            severity=AuditSeverity.WARNING,
            username=username,
            description="Export blocked: no expenses to export",
            is_user_action=True,
        )

    @staticmethod
    def load_failed(username: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            username=username,
            description="Failed to load ledger, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        username: str,
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            username=username,
            description=f"Failed to save after {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
