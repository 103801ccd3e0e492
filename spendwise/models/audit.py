"""
Audit Models for SpendWise

Every mutation and every AI helper call is logged as an audit event.
This provides:
1. Traceability of what happened to each expense
2. Debugging information when storage or the AI misbehaves
3. A correlation id tying together all events of one form session
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Repository
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_UPDATE_MISSED = "expense_update_missed"

    # Form
    VALIDATION_FAILED = "validation_failed"

    # AI helpers
    RECEIPT_ANALYZED = "receipt_analyzed"
    CATEGORY_SUGGESTED = "category_suggested"
    ASSIST_DISCARDED = "assist_discarded"
    ASSIST_FAILED = "assist_failed"

    # Storage
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'receipt', 'storage')"
    )
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Form session this event belongs to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

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
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, category)
        event = AuditEventBuilder.assist_failed("receipt", error, correlation_id)
    """

    @staticmethod
    def expense_added(
        expense_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {amount} in {category}",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense updated: {amount} in {category}",
            details={"amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def expense_update_missed(
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATE_MISSED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Update ignored: no expense with this id",
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            correlation_id=correlation_id,
            description=f"Form validation failed with {len(issues)} issue(s)",
            details={"issues": issues},
        )

    @staticmethod
    def receipt_analyzed(
        mime_type: str,
        size_bytes: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_ANALYZED,
            entity_type="receipt",
            correlation_id=correlation_id,
            description="Receipt analyzed and form pre-filled",
            details={"mime_type": mime_type, "size_bytes": size_bytes},
            is_user_action=True,
        )

    @staticmethod
    def category_suggested(
        suggested_label: str,
        applied: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_SUGGESTED,
            severity=AuditSeverity.INFO if applied else AuditSeverity.WARNING,
            entity_type="category",
            correlation_id=correlation_id,
            description=(
                f"Category suggestion '{suggested_label}' applied"
                if applied
                else f"Category suggestion '{suggested_label}' did not match any category"
            ),
            details={"suggested_label": suggested_label, "applied": applied},
            is_user_action=True,
        )

    @staticmethod
    def assist_discarded(
        assistant: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSIST_DISCARDED,
            entity_type=assistant,
            correlation_id=correlation_id,
            description=f"Late {assistant} response discarded (form closed or switched)",
        )

    @staticmethod
    def assist_failed(
        assistant: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSIST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=assistant,
            correlation_id=correlation_id,
            description=f"{assistant} request failed",
            error_message=error_message,
        )

    @staticmethod
    def storage_read_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            entity_id=key,
            description=f"Could not read '{key}', using default value",
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Could not write '{key}', change kept in memory only",
            error_message=error_message,
        )
