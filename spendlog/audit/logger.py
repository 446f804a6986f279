"""
Audit Logger

DESIGN DECISION: Every mutating engine operation is logged.
This provides:
1. Traceability of what changed in the store
2. Debugging capability when an operation did not complete

The audit logger:
- Writes structured events through structlog
- Never raises (a logging failure must not fail the operation)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from spendlog.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


# Configure structlog for local logging
structlog.configure(
    processors=_processors(json_output=True),
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Route structlog output through stdlib logging at the given level.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Turns AuditEvent models into structured log lines.
    """

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or structlog.get_logger("spendlog.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (OSError, ValueError, TypeError) as e:
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False
        return True

    def log_store_initialized(self, backend: str, location: Optional[str] = None) -> None:
        self.log(AuditEventBuilder.store_initialized(backend=backend, location=location))

    def log_store_closed(self, backend: str) -> None:
        self.log(AuditEventBuilder.store_closed(backend=backend))

    def log_expense_recorded(
        self,
        expense_id: int,
        amount: Any,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a newly stored expense."""
        self.log(AuditEventBuilder.expense_recorded(
            expense_id=expense_id,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    def log_expense_removed(
        self,
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_removed(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_category_added(self, name: str) -> None:
        self.log(AuditEventBuilder.category_added(name))

    def log_category_removed(self, name: str) -> None:
        self.log(AuditEventBuilder.category_removed(name))

    def log_setting_changed(self, key: str, value: str) -> None:
        self.log(AuditEventBuilder.setting_changed(key, value))

    def log_export_generated(self, export_format: str, record_count: int) -> None:
        self.log(AuditEventBuilder.export_generated(export_format, record_count))

    def log_operation_failed(
        self,
        operation: str,
        error: BaseException,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation that did not complete."""
        self.log(AuditEventBuilder.operation_failed(
            operation=operation,
            error=error,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through
    the operations that make it up.
    """
    return uuid4()
