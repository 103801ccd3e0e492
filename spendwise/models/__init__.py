"""
Data Models Package

This package contains all Pydantic models used in SpendWise.
All data flowing through the system must conform to these schemas.
"""

from spendwise.models.category import (
    CATEGORIES,
    Category,
    ExpenseCategory,
    category_label,
    category_labels,
    category_values,
    get_category,
    match_label,
)
from spendwise.models.expense import (
    AssistOutcome,
    AssistStatus,
    Expense,
    ExpenseDraft,
    ExpenseFormValues,
    FormMode,
    ValidationIssue,
    ValidationResult,
)
from spendwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Category registry
    "CATEGORIES",
    "Category",
    "ExpenseCategory",
    "category_label",
    "category_labels",
    "category_values",
    "get_category",
    "match_label",
    # Expense models
    "AssistOutcome",
    "AssistStatus",
    "Expense",
    "ExpenseDraft",
    "ExpenseFormValues",
    "FormMode",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
