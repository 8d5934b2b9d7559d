"""
Data Models Package

This package contains all Pydantic models used in the Budget Tracker.
All data flowing through the system must conform to these schemas.
"""

from src.models.expense import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    FALLBACK_CATEGORY,
    CategoryDefinition,
    ExpenseRecord,
    ExpenseSnapshot,
    category_definition,
    is_known_category,
)
from src.models.analytics import (
    AnalyticsSnapshot,
    CategoryTotal,
    MonthlyTotal,
    SpendSignals,
)
from src.models.advisory import (
    AdvisoryOutcome,
    AdvisoryState,
    Answer,
    ProxyResponse,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "FALLBACK_CATEGORY",
    "CategoryDefinition",
    "ExpenseRecord",
    "ExpenseSnapshot",
    "category_definition",
    "is_known_category",
    # Analytics models
    "AnalyticsSnapshot",
    "CategoryTotal",
    "MonthlyTotal",
    "SpendSignals",
    # Advisory models
    "AdvisoryOutcome",
    "AdvisoryState",
    "Answer",
    "ProxyResponse",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
