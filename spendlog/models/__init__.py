"""
Data Models Package

This package contains all Pydantic models used by Spendlog.
All records flowing through the engine conform to these schemas.
"""

from spendlog.models.expense import (
    DEFAULT_CATEGORIES,
    DEFAULT_SETTINGS,
    FALLBACK_CATEGORY,
    Category,
    Expense,
    ExpenseStats,
    MonthlySeries,
    Setting,
    TimeWindow,
    WeeklySeries,
    coerce_amount,
)
from spendlog.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "DEFAULT_CATEGORIES",
    "DEFAULT_SETTINGS",
    "FALLBACK_CATEGORY",
    "Category",
    "Expense",
    "ExpenseStats",
    "MonthlySeries",
    "Setting",
    "TimeWindow",
    "WeeklySeries",
    "coerce_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
