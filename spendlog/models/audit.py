"""
Audit Models for Spendlog

Every mutating engine operation, and every failure, produces an audit event.
This provides:
1. Traceability of what changed in the store and when
2. Debugging information when an operation did not complete
3. A single structured shape for everything the engine logs

DESIGN DECISION: Audit events are emitted to the structured log only.
They are not written back into the expense store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    STORE_INITIALIZED = "store_initialized"
    STORE_CLOSED = "store_closed"

    # Expenses
    EXPENSE_RECORDED = "expense_recorded"
    EXPENSE_REMOVED = "expense_removed"

    # Categories and settings
    CATEGORY_ADDED = "category_added"
    CATEGORY_REMOVED = "category_removed"
    SETTING_CHANGED = "setting_changed"

    # Read paths consumed by export collaborators
    EXPORT_GENERATED = "export_generated"

    # Failures
    OPERATION_FAILED = "operation_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'expense', 'category', 'setting')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the record (expense id, category name, setting key)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
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

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

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
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_recorded(expense_id, amount, category)
        event = AuditEventBuilder.operation_failed("add_expense", error)
    """

    @staticmethod
    def store_initialized(backend: str, location: Optional[str] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_INITIALIZED,
            entity_type="store",
            entity_id=location,
            description=f"Store initialized: {backend}",
            details={"backend": backend},
        )

    @staticmethod
    def store_closed(backend: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_CLOSED,
            severity=AuditSeverity.DEBUG,
            entity_type="store",
            description=f"Store closed: {backend}",
        )

    @staticmethod
    def expense_recorded(
        expense_id: int,
        amount: Any,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description=f"Expense recorded in {category}",
            details={
                "amount": str(amount),
                "category": category,
            },
        )

    @staticmethod
    def expense_removed(
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REMOVED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description=f"Expense removed: {expense_id}",
        )

    @staticmethod
    def category_added(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=name,
            description=f"Category added: {name}",
        )

    @staticmethod
    def category_removed(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_REMOVED,
            entity_type="category",
            entity_id=name,
            description=f"Category removed: {name}",
        )

    @staticmethod
    def setting_changed(key: str, value: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTING_CHANGED,
            entity_type="setting",
            entity_id=key,
            description=f"Setting changed: {key}",
            details={"value": value},
        )

    @staticmethod
    def export_generated(export_format: str, record_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            entity_type="export",
            description=f"Export generated as {export_format}",
            details={
                "format": export_format,
                "record_count": record_count,
            },
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error: BaseException,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Operation did not complete: {operation}",
            error_code=type(error).__name__,
            error_message=str(error),
            details=details or {},
            correlation_id=correlation_id,
        )
