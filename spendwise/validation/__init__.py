"""Form validation package."""

from spendwise.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
