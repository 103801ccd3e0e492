"""
Core Data Models for SpendWise

These models define the schemas for everything that flows between
the form, the repository and storage. They are designed to:
1. Enforce the expense invariants at construction time
2. Round-trip through the JSON storage payload unchanged
3. Give the form clear, field-level validation messages

DESIGN DECISION: Stored expenses are frozen. An edit is a full
replacement by id, never an in-place mutation.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from spendwise.models.category import ExpenseCategory

# Models below have a field called "date", which shadows the type in class bodies
CalendarDate = date


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    An expense that has passed validation but has no identity yet.

    This is what the form hands to the repository on create.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent (currency-agnostic)"
    )
    date: CalendarDate = Field(
        ...,
        description="Calendar date of the expense"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Category value from the registry"
    )
    notes: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Short description of the expense"
    )

    @field_validator('date', mode='before')
    @classmethod
    def reduce_datetime_to_date(cls, v):
        """
        Accept ISO datetimes as well as plain dates.

        Older payloads stored the full timestamp (e.g. 2024-01-05T10:00:00.000Z);
        only the calendar date is meaningful.
        """
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, amount: Decimal) -> float:
        # Stored as a JSON number
        return float(amount)


class Expense(ExpenseDraft):
    """
    A stored expense.

    The id is generated once at creation and never changes.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque unique identifier"
    )

    @classmethod
    def from_draft(cls, draft: ExpenseDraft, expense_id: Optional[str] = None) -> "Expense":
        """Attach an identity to a validated draft."""
        data = draft.model_dump()
        if expense_id is not None:
            data["id"] = expense_id
        return cls(**data)

    def to_draft(self) -> ExpenseDraft:
        return ExpenseDraft(**self.model_dump(exclude={"id"}))


# =============================================================================
# FORM MODELS
# =============================================================================

class FormMode(str, Enum):
    """States of the expense form."""
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"


class ExpenseFormValues(BaseModel):
    """
    Raw form values.

    Everything is optional or loosely typed because this is what the
    user (or an AI helper) typed in, before validation.
    """
    model_config = ConfigDict(validate_assignment=True)

    amount: Optional[Decimal] = None
    date: Optional[CalendarDate] = Field(default_factory=CalendarDate.today)
    category: str = ""
    notes: str = ""

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseFormValues":
        """Pre-populate the form from a stored expense."""
        return cls(
            amount=expense.amount,
            date=expense.date,
            category=expense.category.value,
            notes=expense.notes,
        )


class AssistStatus(str, Enum):
    """What happened to an AI helper request."""
    APPLIED = "applied"           # Fields were filled in
    NOT_APPLIED = "not_applied"   # Answer could not be used (e.g. unknown label)
    FAILED = "failed"             # Transport or infrastructure error
    DISCARDED = "discarded"       # Form closed or switched before the answer came back
    REJECTED = "rejected"         # Request was not sent (busy, too little input, bad image)


class AssistOutcome(BaseModel):
    """
    Result of an AI helper action, shown to the user as a notification.

    An outcome never implies that anything was saved.
    """

    status: AssistStatus
    title: str
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status == AssistStatus.APPLIED

    @property
    def discarded(self) -> bool:
        """The answer arrived too late and was not shown or applied."""
        return self.status == AssistStatus.DISCARDED

    @property
    def is_error(self) -> bool:
        return self.status in (AssistStatus.FAILED, AssistStatus.NOT_APPLIED, AssistStatus.REJECTED)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'out_of_range', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Outcome of validating form values.

    Either valid, carrying the ExpenseDraft to commit, or invalid,
    carrying the field errors. Warnings may accompany a valid result.
    """

    draft: Optional[ExpenseDraft] = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def valid(
        cls,
        draft: ExpenseDraft,
        warnings: Optional[list[ValidationIssue]] = None,
    ) -> "ValidationResult":
        return cls(draft=draft, issues=list(warnings or []))

    @classmethod
    def invalid(cls, issues: list[ValidationIssue]) -> "ValidationResult":
        if not any(issue.severity == "error" for issue in issues):
            raise ValueError("An invalid result needs at least one error")
        return cls(draft=None, issues=issues)

    @property
    def is_valid(self) -> bool:
        return self.draft is not None and not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    def errors_for(self, field: str) -> list[str]:
        """Error messages for one form field, for inline display."""
        return [
            issue.message
            for issue in self.issues
            if issue.field == field and issue.severity == "error"
        ]
