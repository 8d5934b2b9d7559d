"""
Audit Models for Budget Tracker

Every significant action in the system is logged as an audit event.
This provides:
1. Traceability of every mutation of the user's data
2. Debugging information when remote calls or storage misbehave

DESIGN DECISION: Audit events never carry secrets. Nothing that could
contain the Gemini API key is ever put in `details` or `error_message`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense store
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_REJECTED = "expense_rejected"
    BUDGET_UPDATED = "budget_updated"

    # Persistence
    STATE_LOADED = "state_loaded"
    PERSISTENCE_FAILED = "persistence_failed"

    # Advisory
    ADVICE_REQUESTED = "advice_requested"
    ADVICE_ANSWERED = "advice_answered"
    ADVICE_FAILED = "advice_failed"
    ADVICE_DISCARDED = "advice_discarded"

    # Proxy
    PROXY_REQUEST_HANDLED = "proxy_request_handled"
    PROXY_REQUEST_FAILED = "proxy_request_failed"


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
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'budget', 'advice')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
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
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "500", "Transport")
        event = AuditEventBuilder.advice_failed(seq, "network", "timed out")
    """

    @staticmethod
    def expense_added(expense_id: int, amount: str, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=str(expense_id),
            description=f"Expense added: ₹{amount} ({category})",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: int, removed: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=str(expense_id),
            description="Expense deleted" if removed else "Delete ignored: expense not found",
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def expense_rejected(field: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description=f"Expense input rejected: {message}",
            details={"field": field},
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(budget: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            description=f"Budget set to ₹{budget}",
            details={"budget": budget},
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(expense_count: int, budget: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="store",
            description=f"Restored {expense_count} expenses from storage",
            details={"expense_count": expense_count, "budget": budget},
        )

    @staticmethod
    def persistence_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description=f"Storage {operation} failed; continuing in memory",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def advice_requested(sequence: int, question_length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_REQUESTED,
            entity_type="advice",
            entity_id=str(sequence),
            description="Advisory question submitted",
            details={"question_length": question_length},
            is_user_action=True,
        )

    @staticmethod
    def advice_answered(sequence: int, answer_length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_ANSWERED,
            entity_type="advice",
            entity_id=str(sequence),
            description="Advisory answer received",
            details={"answer_length": answer_length},
        )

    @staticmethod
    def advice_failed(sequence: int, error_kind: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="advice",
            entity_id=str(sequence),
            description=f"Advisory request failed: {error_kind}",
            details={"error_kind": error_kind},
            error_message=error_message,
        )

    @staticmethod
    def advice_discarded(sequence: int, latest_sequence: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_DISCARDED,
            severity=AuditSeverity.DEBUG,
            entity_type="advice",
            entity_id=str(sequence),
            description="Stale advisory result discarded",
            details={"latest_sequence": latest_sequence},
        )

    @staticmethod
    def proxy_request_handled(status_code: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROXY_REQUEST_HANDLED,
            entity_type="proxy",
            description=f"Proxy request answered with {status_code}",
            details={"status_code": status_code},
        )

    @staticmethod
    def proxy_request_failed(error_kind: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROXY_REQUEST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="proxy",
            description=f"Proxy request failed: {error_kind}",
            details={"error_kind": error_kind},
            error_message=error_message,
        )
