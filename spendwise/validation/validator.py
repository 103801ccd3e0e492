"""
Expense Form Validation

DESIGN DECISION: Validation is the gate between the form and the
repository. Nothing reaches the repository unless it passes here.

The validator returns a ValidationResult, never raises:
- Valid: carries an ExpenseDraft, possibly with warnings
- Invalid: carries field-level errors for inline display

Checks:
- amount: present, finite, greater than zero
- notes: length within the configured bounds
- category: present and a registry value
- date: present, not in the future, not before the minimum date

Warnings (non-blocking):
- amount unusually large (possible typo or misread receipt)
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from spendwise.config import get_settings
from spendwise.models.category import get_category
from spendwise.models.expense import (
    ExpenseDraft,
    ExpenseFormValues,
    ValidationIssue,
    ValidationResult,
)


class ExpenseValidator:
    """Validates raw form values and assembles an ExpenseDraft."""

    def __init__(self):
        self._settings = get_settings().app

    def _check_amount(self, amount: Optional[Decimal]) -> list[ValidationIssue]:
        if amount is None:
            return [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required.",
            )]
        if not amount.is_finite() or amount <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be positive.",
            )]
        return []

    def _check_notes(self, notes: str) -> list[ValidationIssue]:
        length = len(notes.strip())
        if length < self._settings.notes_min_length:
            return [ValidationIssue(
                field="notes",
                issue_type="too_short",
                message="Please add more details.",
            )]
        if length > self._settings.notes_max_length:
            return [ValidationIssue(
                field="notes",
                issue_type="too_long",
                message=f"Notes must be at most {self._settings.notes_max_length} characters.",
            )]
        return []

    def _check_category(self, category: str) -> list[ValidationIssue]:
        if not category:
            return [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required.",
            )]
        if get_category(category) is None:
            return [ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Unknown category: {category}",
            )]
        return []

    def _check_date(self, expense_date: Optional[date], today: date) -> list[ValidationIssue]:
        if expense_date is None:
            return [ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required.",
            )]
        if expense_date > today:
            return [ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Date cannot be in the future.",
            )]
        if expense_date < self._settings.min_expense_date:
            return [ValidationIssue(
                field="date",
                issue_type="too_old",
                message=f"Date cannot be before {self._settings.min_expense_date.isoformat()}.",
            )]
        return []

    def validate(
        self,
        values: ExpenseFormValues,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Validate form values.

        Args:
            values: Raw form values
            today: Reference date for the future-date check (defaults to today)
        """
        today = today or date.today()

        issues = []
        issues.extend(self._check_amount(values.amount))
        issues.extend(self._check_date(values.date, today))
        issues.extend(self._check_category(values.category))
        issues.extend(self._check_notes(values.notes))

        if issues:
            return ValidationResult.invalid(issues)

        try:
            draft = ExpenseDraft(
                amount=values.amount,
                date=values.date,
                category=values.category,
                notes=values.notes,
            )
        except ValidationError as e:
            # Configured bounds can be looser than the model's own
            return ValidationResult.invalid([
                ValidationIssue(
                    field=str(error["loc"][0]) if error["loc"] else "form",
                    issue_type="invalid_value",
                    message=error["msg"],
                )
                for error in e.errors()
            ])

        warnings = []
        max_amount = Decimal(str(self._settings.max_expense_amount))
        if draft.amount > max_amount:
            warnings.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high. Please double-check it.",
                severity="warning",
            ))

        return ValidationResult.valid(draft, warnings)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Summarize a validation result for display above the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []
        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
