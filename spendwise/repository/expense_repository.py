"""
Expense Repository

Owns the authoritative in-memory list of expenses and writes the
full list through the PersistentStore after every mutation.

GUARANTEES:
- Insertion order is kept in memory and in storage
- list_expenses() is newest date first; same-date expenses keep
  insertion order (stable sort)
- A malformed or unreadable stored payload loads as an empty list
- A failed write never rolls back the in-memory change
"""

from typing import Optional
from uuid import UUID, uuid4

from pydantic import TypeAdapter

from spendwise.audit import AuditLogger
from spendwise.models.expense import Expense, ExpenseDraft
from spendwise.services.storage import NotFoundError, PersistentStore


EXPENSE_LIST = TypeAdapter(list[Expense])


class ExpenseRepository:
    """
    CRUD over the expense collection.

    The storage port is injected, so tests can hand in a
    PersistentStore over an InMemoryKeyValueStore.
    """

    def __init__(
        self,
        store: PersistentStore,
        storage_key: str = "expenses",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._storage_key = storage_key
        self._audit_logger = audit_logger or AuditLogger()
        self._expenses: list[Expense] = self._store.load(storage_key, EXPENSE_LIST, [])
        self.last_save_ok = True

    def __len__(self) -> int:
        return len(self._expenses)

    def _persist(self) -> None:
        self.last_save_ok = self._store.save(self._storage_key, self._expenses, EXPENSE_LIST)

    def _new_id(self) -> str:
        existing = {expense.id for expense in self._expenses}
        while True:
            candidate = str(uuid4())
            if candidate not in existing:
                return candidate

    def _index_of(self, expense_id: str) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    def add(
        self,
        draft: ExpenseDraft,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """Create a new expense with a fresh id and append it."""
        expense = Expense.from_draft(draft, expense_id=self._new_id())
        self._expenses.append(expense)
        self._persist()

        self._audit_logger.log_expense_added(
            expense_id=expense.id,
            amount=str(expense.amount),
            category=expense.category.value,
            correlation_id=correlation_id,
        )
        return expense

    def update(
        self,
        expense: Expense,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Replace the stored expense having the same id.

        Raises:
            NotFoundError: If no expense has this id (nothing is written)
        """
        index = self._index_of(expense.id)
        if index is None:
            self._audit_logger.log_expense_update_missed(
                expense_id=expense.id,
                correlation_id=correlation_id,
            )
            raise NotFoundError(f"No expense with id {expense.id}")

        self._expenses[index] = expense
        self._persist()

        self._audit_logger.log_expense_updated(
            expense_id=expense.id,
            amount=str(expense.amount),
            category=expense.category.value,
            correlation_id=correlation_id,
        )
        return expense

    def remove(self, expense_id: str) -> bool:
        """
        Delete the expense with this id.

        Idempotent: returns False (and writes nothing) if it is already gone.
        """
        index = self._index_of(expense_id)
        if index is None:
            return False

        del self._expenses[index]
        self._persist()
        self._audit_logger.log_expense_deleted(expense_id)
        return True

    def get(self, expense_id: str) -> Optional[Expense]:
        index = self._index_of(expense_id)
        return self._expenses[index] if index is not None else None

    def snapshot(self) -> list[Expense]:
        """All expenses in insertion order."""
        return list(self._expenses)

    def list_expenses(self) -> list[Expense]:
        """All expenses, newest date first."""
        # sorted() is stable, also with reverse=True
        return sorted(self._expenses, key=lambda expense: expense.date, reverse=True)
