"""
Tests for form validation.
"""

from datetime import date
from decimal import Decimal

import pytest

from spendwise.models.category import ExpenseCategory
from spendwise.models.expense import ExpenseFormValues
from spendwise.validation import ExpenseValidator


TODAY = date(2024, 6, 15)


@pytest.fixture
def validator():
    return ExpenseValidator()


def make_values(**overrides):
    values = {
        "amount": Decimal("12.50"),
        "date": date(2024, 6, 1),
        "category": "food",
        "notes": "Lunch",
    }
    values.update(overrides)
    return ExpenseFormValues(**values)


class TestExpenseValidator:
    """Tests for ExpenseValidator."""

    def test_valid_values(self, validator):
        result = validator.validate(make_values(), today=TODAY)
        assert result.is_valid
        assert result.draft.amount == Decimal("12.50")
        assert result.draft.category == ExpenseCategory.FOOD
        assert result.warnings == []

    def test_missing_amount(self, validator):
        result = validator.validate(make_values(amount=None), today=TODAY)
        assert result.errors_for("amount") == ["Amount is required."]

    def test_non_positive_amount(self, validator):
        for amount in (Decimal("0"), Decimal("-5")):
            result = validator.validate(make_values(amount=amount), today=TODAY)
            assert result.errors_for("amount") == ["Amount must be positive."]

    def test_short_notes(self, validator):
        result = validator.validate(make_values(notes="ab"), today=TODAY)
        assert result.errors_for("notes") == ["Please add more details."]

    def test_whitespace_notes_are_short(self, validator):
        result = validator.validate(make_values(notes="  a  "), today=TODAY)
        assert result.errors_for("notes") == ["Please add more details."]

    def test_long_notes(self, validator):
        result = validator.validate(make_values(notes="x" * 101), today=TODAY)
        assert len(result.errors_for("notes")) == 1

    def test_notes_length_bounds_are_inclusive(self, validator):
        assert validator.validate(make_values(notes="abc"), today=TODAY).is_valid
        assert validator.validate(make_values(notes="x" * 100), today=TODAY).is_valid

    def test_missing_category(self, validator):
        result = validator.validate(make_values(category=""), today=TODAY)
        assert result.errors_for("category") == ["Category is required."]

    def test_unknown_category(self, validator):
        result = validator.validate(make_values(category="travel"), today=TODAY)
        assert result.errors_for("category") == ["Unknown category: travel"]

    def test_future_date(self, validator):
        result = validator.validate(make_values(date=date(2024, 6, 16)), today=TODAY)
        assert result.errors_for("date") == ["Date cannot be in the future."]

    def test_today_is_allowed(self, validator):
        assert validator.validate(make_values(date=TODAY), today=TODAY).is_valid

    def test_too_old_date(self, validator):
        result = validator.validate(make_values(date=date(1899, 12, 31)), today=TODAY)
        assert result.errors_for("date") == ["Date cannot be before 1900-01-01."]

    def test_missing_date(self, validator):
        result = validator.validate(make_values(date=None), today=TODAY)
        assert result.errors_for("date") == ["Date is required."]

    def test_all_errors_reported_together(self, validator):
        values = ExpenseFormValues(amount=None, date=TODAY, category="", notes="")
        result = validator.validate(values, today=TODAY)
        assert {issue.field for issue in result.issues} == {"amount", "category", "notes"}
        assert result.draft is None

    def test_large_amount_warns(self, validator):
        result = validator.validate(make_values(amount=Decimal("250000")), today=TODAY)
        assert result.is_valid
        assert len(result.warnings) == 1


class TestUserFriendlySummary:
    """Tests for the summary text."""

    def test_all_passed(self, validator):
        result = validator.validate(make_values(), today=TODAY)
        assert "All checks passed" in validator.get_user_friendly_summary(result)

    def test_lists_errors(self, validator):
        result = validator.validate(make_values(amount=None, notes=""), today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert "Amount is required." in summary
        assert "Please add more details." in summary
