"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of changes to the user's expenses and budget
2. Debugging capability for remote advisory calls
3. A record of storage failures, which are otherwise invisible to the user

The audit logger:
- Is synchronous; structured logging is local and cheap
- Never receives secrets
"""

from typing import Optional

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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


def get_logger(name: Optional[str] = None):
    """Module-level structlog logger."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the most recent events in memory (for the dashboard's
    activity view and for tests) and writes every event to structlog.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Record an audit event locally."""
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

        log_dict = event.to_log_dict()
        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_expense_added(self, expense_id: int, amount: str, category: str) -> None:
        self.log(AuditEventBuilder.expense_added(expense_id, amount, category))

    def log_expense_deleted(self, expense_id: int, removed: bool) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id, removed))

    def log_expense_rejected(self, field: str, message: str) -> None:
        self.log(AuditEventBuilder.expense_rejected(field, message))

    def log_budget_updated(self, budget: str) -> None:
        self.log(AuditEventBuilder.budget_updated(budget))

    def log_state_loaded(self, expense_count: int, budget: str) -> None:
        self.log(AuditEventBuilder.state_loaded(expense_count, budget))

    def log_persistence_failed(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.persistence_failed(operation, error_message))

    def log_advice_requested(self, sequence: int, question_length: int) -> None:
        self.log(AuditEventBuilder.advice_requested(sequence, question_length))

    def log_advice_answered(self, sequence: int, answer_length: int) -> None:
        self.log(AuditEventBuilder.advice_answered(sequence, answer_length))

    def log_advice_failed(self, sequence: int, error_kind: str, error_message: str) -> None:
        self.log(AuditEventBuilder.advice_failed(sequence, error_kind, error_message))

    def log_advice_discarded(self, sequence: int, latest_sequence: int) -> None:
        self.log(AuditEventBuilder.advice_discarded(sequence, latest_sequence))

    def log_proxy_handled(self, status_code: int) -> None:
        self.log(AuditEventBuilder.proxy_request_handled(status_code))

    def log_proxy_failed(self, error_kind: str, error_message: str) -> None:
        self.log(AuditEventBuilder.proxy_request_failed(error_kind, error_message))
