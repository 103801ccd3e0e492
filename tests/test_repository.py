"""
Tests for the expense repository.
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from spendwise.models.audit import AuditEventType
from spendwise.models.expense import Expense, ExpenseDraft
from spendwise.repository import ExpenseRepository
from spendwise.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    NotFoundError,
    PersistentStore,
)


def make_draft(amount="10", on=date(2024, 1, 5), category="food", notes="Lunch"):
    return ExpenseDraft(amount=Decimal(amount), date=on, category=category, notes=notes)


def stored_list(backend, key="expenses"):
    return json.loads(backend.get_item(key))


class TestRepositoryLoad:
    """Tests for loading the stored collection."""

    def test_empty_store_loads_empty(self, repository):
        assert len(repository) == 0
        assert repository.list_expenses() == []

    def test_loads_stored_expenses(self):
        backend = InMemoryKeyValueStore({"expenses": json.dumps([
            {"id": "a", "amount": 5, "date": "2024-01-05", "category": "transport", "notes": "Bus ticket"},
        ])})
        repository = ExpenseRepository(PersistentStore(backend))

        expense = repository.get("a")
        assert expense.amount == Decimal("5")
        assert expense.date == date(2024, 1, 5)

    def test_loads_iso_datetime_dates(self):
        """Test payloads that stored full ISO datetimes still load."""
        backend = InMemoryKeyValueStore({"expenses": json.dumps([
            {"id": "a", "amount": 5, "date": "2024-01-05T00:00:00.000Z", "category": "food", "notes": "Bagel"},
        ])})
        repository = ExpenseRepository(PersistentStore(backend))
        assert repository.get("a").date == date(2024, 1, 5)

    def test_malformed_payload_loads_empty(self, audit_logger):
        backend = InMemoryKeyValueStore({"expenses": '{"not": "a list"}'})
        repository = ExpenseRepository(PersistentStore(backend), audit_logger=audit_logger)
        assert len(repository) == 0

    def test_invalid_record_rejects_whole_payload(self):
        backend = InMemoryKeyValueStore({"expenses": json.dumps([
            {"id": "a", "amount": 5, "date": "2024-01-05", "category": "food", "notes": "Bagel"},
            {"id": "b", "amount": -1, "date": "2024-01-05", "category": "food", "notes": "Bad"},
        ])})
        repository = ExpenseRepository(PersistentStore(backend))
        assert len(repository) == 0

    def test_unreadable_backend_loads_empty(self):
        backend = InMemoryKeyValueStore({"expenses": "[]"})
        backend.fail_reads = True
        repository = ExpenseRepository(PersistentStore(backend))
        assert len(repository) == 0


class TestRepositoryMutations:
    """Tests for add/update/remove."""

    def test_add_assigns_id_and_persists(self, repository, backend):
        expense = repository.add(make_draft())

        assert expense.id
        assert repository.get(expense.id) == expense
        assert stored_list(backend) == [{
            "amount": 10.0,
            "date": "2024-01-05",
            "category": "food",
            "notes": "Lunch",
            "id": expense.id,
        }]

    def test_add_gives_unique_ids(self, repository):
        ids = {repository.add(make_draft()).id for _ in range(20)}
        assert len(ids) == 20

    def test_storage_keeps_insertion_order(self, repository, backend):
        first = repository.add(make_draft(on=date(2024, 1, 1), notes="First"))
        second = repository.add(make_draft(on=date(2024, 3, 1), notes="Second"))
        assert [item["id"] for item in stored_list(backend)] == [first.id, second.id]

    def test_update_replaces_in_place(self, repository, backend):
        first = repository.add(make_draft(notes="First"))
        second = repository.add(make_draft(notes="Second"))

        updated = Expense.from_draft(make_draft(amount="42", notes="Changed"), expense_id=first.id)
        repository.update(updated)

        assert repository.get(first.id).amount == Decimal("42")
        assert [e.id for e in repository.snapshot()] == [first.id, second.id]
        assert stored_list(backend)[0]["notes"] == "Changed"

    def test_update_missing_raises(self, repository, backend, audit_logger):
        repository.add(make_draft())
        before = backend.get_item("expenses")

        with pytest.raises(NotFoundError):
            repository.update(Expense.from_draft(make_draft(), expense_id="missing"))

        assert backend.get_item("expenses") == before
        assert audit_logger.history[-1].event_type == AuditEventType.EXPENSE_UPDATE_MISSED

    def test_remove(self, repository, backend):
        expense = repository.add(make_draft())
        assert repository.remove(expense.id) is True
        assert repository.get(expense.id) is None
        assert stored_list(backend) == []

    def test_remove_is_idempotent(self, repository):
        expense = repository.add(make_draft())
        repository.remove(expense.id)
        assert repository.remove(expense.id) is False
        assert repository.remove("never-existed") is False

    def test_failed_write_keeps_memory_state(self, repository, backend, audit_logger):
        backend.fail_writes = True

        expense = repository.add(make_draft())

        assert repository.get(expense.id) == expense
        assert repository.last_save_ok is False
        assert audit_logger.history[-2].event_type == AuditEventType.STORAGE_WRITE_FAILED

        backend.fail_writes = False
        repository.add(make_draft(notes="Later"))
        assert repository.last_save_ok is True
        assert len(stored_list(backend)) == 2

    def test_mutations_are_audited(self, repository, audit_logger):
        expense = repository.add(make_draft())
        repository.update(expense)
        repository.remove(expense.id)
        types = [event.event_type for event in audit_logger.history]
        assert types == [
            AuditEventType.EXPENSE_ADDED,
            AuditEventType.EXPENSE_UPDATED,
            AuditEventType.EXPENSE_DELETED,
        ]


class TestRepositoryListing:
    """Tests for list ordering."""

    def test_newest_first(self, repository):
        old = repository.add(make_draft(on=date(2024, 1, 1), notes="Old"))
        new = repository.add(make_draft(on=date(2024, 3, 1), notes="New"))
        mid = repository.add(make_draft(on=date(2024, 2, 1), notes="Mid"))
        assert [e.id for e in repository.list_expenses()] == [new.id, mid.id, old.id]

    def test_same_date_keeps_insertion_order(self, repository):
        first = repository.add(make_draft(notes="First"))
        second = repository.add(make_draft(notes="Second"))
        third = repository.add(make_draft(notes="Third"))
        assert [e.id for e in repository.list_expenses()] == [first.id, second.id, third.id]

    def test_snapshot_is_a_copy(self, repository):
        repository.add(make_draft())
        repository.snapshot().clear()
        assert len(repository) == 1


class TestRepositoryPersistence:
    """Tests for a round trip through the JSON file backend."""

    def test_reload_from_file(self, tmp_path):
        path = tmp_path / "spendwise.json"
        repository = ExpenseRepository(PersistentStore(JsonFileKeyValueStore(path)))
        saved = repository.add(make_draft(amount="12.34", category="utilities", notes="Power bill"))

        reloaded = ExpenseRepository(PersistentStore(JsonFileKeyValueStore(path)))

        assert reloaded.snapshot() == [saved]

    def test_non_utf8_file_loads_empty(self, tmp_path):
        path = tmp_path / "spendwise.json"
        path.write_bytes(b'{"expenses": "[\xff\xfe]"}')

        repository = ExpenseRepository(PersistentStore(JsonFileKeyValueStore(path)))

        assert len(repository) == 0

    def test_non_utf8_file_is_replaced_on_write(self, tmp_path):
        path = tmp_path / "spendwise.json"
        path.write_bytes(b'{"expenses": "[\xff\xfe]"}')
        repository = ExpenseRepository(PersistentStore(JsonFileKeyValueStore(path)))

        saved = repository.add(make_draft())

        assert repository.last_save_ok is True
        reloaded = ExpenseRepository(PersistentStore(JsonFileKeyValueStore(path)))
        assert reloaded.snapshot() == [saved]
