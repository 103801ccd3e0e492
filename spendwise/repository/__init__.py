"""Expense repository package."""

from spendwise.repository.expense_repository import ExpenseRepository

__all__ = ["ExpenseRepository"]
