"""
Audit Logger

DESIGN DECISION: Every mutation and every AI helper call is logged.
This provides:
1. Traceability of what happened to each expense
2. Debugging capability when storage or the AI misbehaves
3. Correlation of all events that belong to one form session

The audit logger:
- Writes structured JSON log lines via structlog
- Never raises (a logging failure must not break the form)
- Keeps the events it emitted in memory for inspection
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from spendwise.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


class AuditLogger:
    """
    Central audit logging service.

    Events are logged locally and kept in a bounded in-memory
    history (most recent last).
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("spendwise.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def history(self) -> list[AuditEvent]:
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the event's severity."""
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Local logging is best effort
            self._logger.error("audit_log_failed", error=str(e))

    def log_expense_added(
        self,
        expense_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    def log_expense_updated(
        self,
        expense_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(self, expense_id: str) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id))

    def log_expense_update_missed(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_update_missed(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_receipt_analyzed(
        self,
        mime_type: str,
        size_bytes: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.receipt_analyzed(
            mime_type=mime_type,
            size_bytes=size_bytes,
            correlation_id=correlation_id,
        ))

    def log_category_suggested(
        self,
        suggested_label: str,
        applied: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.category_suggested(
            suggested_label=suggested_label,
            applied=applied,
            correlation_id=correlation_id,
        ))

    def log_assist_discarded(
        self,
        assistant: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.assist_discarded(
            assistant=assistant,
            correlation_id=correlation_id,
        ))

    def log_assist_failed(
        self,
        assistant: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.assist_failed(
            assistant=assistant,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_storage_read_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_read_failed(key, error_message))

    def log_storage_write_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_write_failed(key, error_message))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The form controller creates one each time the form is opened.
    """
    return uuid4()
