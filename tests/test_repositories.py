"""
Tests for the entity repositories.

Covers the CRUD contract shared by all collections plus the
per-collection helpers (username lookup, seeding, expense filters).
"""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from homeledger.models import (
    AuditEventType,
    CategoryPatch,
    ExpensePatch,
    NewCategory,
    NewExpense,
    UserRole,
)
from homeledger.services.setup import DEFAULT_CATEGORIES
from homeledger.services.storage import (
    CategoryRepository,
    ExpenseRepository,
    FileKeyValueBackend,
    InMemoryKeyValueBackend,
    JSONStore,
    UserRepository,
)


def new_expense(title: str = "Groceries", user_id: str = "user-1", **overrides) -> NewExpense:
    fields = {
        "title": title,
        "amount": Decimal("150000"),
        "category_id": "cat-1",
        "date": date(2024, 3, 10),
        "user_id": user_id,
    }
    fields.update(overrides)
    return NewExpense(**fields)


class TestCollectionContract:
    """CRUD behaviour common to every repository."""

    def test_add_then_get_all(self, run, categories):
        """Test that add assigns id and createdAt and the record is listed."""
        added = run(categories.add(NewCategory(name="Pets", color="#123456")))
        assert added.id
        assert added.created_at is not None

        listed = run(categories.get_all())
        assert listed == [added]
        assert listed[0].name == "Pets"

    def test_add_ignores_supplied_identity(self, run, categories):
        """Test that callers cannot choose id or createdAt."""
        added = run(categories.add({"id": "mine", "createdAt": "2000-01-01T00:00:00Z", "name": "Pets"}))
        assert added.id != "mine"
        assert added.created_at.year != 2000

    def test_get_unknown_id(self, run, categories):
        assert run(categories.get("nope")) is None

    def test_delete_removes_record(self, run, categories):
        """Test hard delete."""
        keep = run(categories.add(NewCategory(name="Keep")))
        drop = run(categories.add(NewCategory(name="Drop")))
        run(categories.delete(drop.id))
        assert run(categories.get_all()) == [keep]

    def test_delete_unknown_id_leaves_collection_unchanged(self, run, categories, backend):
        """Test that deleting a missing id writes nothing."""
        run(categories.add(NewCategory(name="Pets")))
        before = backend.snapshot()
        run(categories.delete("does-not-exist"))
        assert backend.snapshot() == before

    def test_update_unknown_id_returns_none(self, run, categories, backend):
        """Test that updating a missing id returns None and writes nothing."""
        run(categories.add(NewCategory(name="Pets")))
        before = backend.snapshot()
        assert run(categories.update("does-not-exist", CategoryPatch(name="X"))) is None
        assert backend.snapshot() == before

    def test_update_keeps_id_and_created_at(self, run, categories):
        """Test that a patch only touches the fields it sets."""
        added = run(categories.add(NewCategory(name="Pets", color="#123456")))
        updated = run(categories.update(added.id, CategoryPatch(name="Animals")))
        assert updated.id == added.id
        assert updated.created_at == added.created_at
        assert updated.name == "Animals"
        assert updated.color == "#123456"
        assert run(categories.get(added.id)) == updated

    def test_save_all_replaces_collection(self, run, categories):
        run(categories.add(NewCategory(name="Old")))
        fresh = run(categories.add(NewCategory(name="Fresh")))
        run(categories.save_all([fresh]))
        assert [c.name for c in run(categories.get_all())] == ["Fresh"]

    def test_failed_write_is_soft(self, run, audit):
        """Test that a failed write is audited and reported by save_all."""
        backend = InMemoryKeyValueBackend(fail_on={"categories"})
        repository = CategoryRepository(JSONStore(backend, audit), audit)

        added = run(repository.add(NewCategory(name="Pets")))
        assert added.name == "Pets"
        assert AuditEventType.STORAGE_WRITE_FAILED in audit.types()
        assert run(repository.save_all([added])) is False

        backend.fail_on.clear()
        assert run(repository.get_all()) == []
        assert run(repository.save_all([added])) is True

    def test_stored_as_camel_case_array(self, run, expenses, backend):
        """Test the on-disk JSON layout."""
        run(expenses.add(new_expense()))
        stored = json.loads(backend.snapshot()["expenses"])
        assert isinstance(stored, list)
        assert set(stored[0]) >= {"id", "title", "amount", "categoryId", "date", "userId", "createdAt"}

    def test_corrupt_collection_reads_empty(self, run, audit):
        """Test that a corrupt collection degrades to no data."""
        store = JSONStore(InMemoryKeyValueBackend({"categories": "[{"}), audit)
        assert run(CategoryRepository(store, audit).get_all()) == []

    def test_non_array_collection_reads_empty(self, run, audit):
        store = JSONStore(InMemoryKeyValueBackend({"categories": '{"a": 1}'}), audit)
        assert run(CategoryRepository(store, audit).get_all()) == []
        assert audit.types() == [AuditEventType.STORAGE_READ_FAILED]

    def test_invalid_records_skipped_but_preserved(self, run, audit):
        """Test that one bad record neither breaks reads nor gets lost."""
        raw = json.dumps([
            {"id": "c1", "name": "Food", "color": "#FF6384", "createdAt": "2024-01-01T00:00:00Z"},
            {"id": "c2", "name": ""},
        ])
        backend = InMemoryKeyValueBackend({"categories": raw})
        repository = CategoryRepository(JSONStore(backend, audit), audit)

        assert [c.id for c in run(repository.get_all())] == ["c1"]
        assert AuditEventType.RECORD_SKIPPED in audit.types()

        run(repository.add(NewCategory(name="Pets")))
        stored = json.loads(backend.snapshot()["categories"])
        assert {"id": "c2", "name": ""} in stored
        assert len(stored) == 3

    def test_concurrent_adds_do_not_lose_writes(self, run, tmp_path):
        """Test that overlapping read-modify-write cycles are serialized."""
        store = JSONStore(FileKeyValueBackend(tmp_path))
        repository = ExpenseRepository(store)

        async def add_many():
            await asyncio.gather(*(
                repository.add(new_expense(title=f"Expense {n}")) for n in range(20)
            ))
            return await repository.get_all()

        stored = run(add_many())
        assert len(stored) == 20
        assert len({expense.id for expense in stored}) == 20


class TestUserRepository:

    def test_find_by_username_is_exact(self, run, users):
        """Test that username lookup is case-sensitive."""
        run(users.add({"name": "Ann", "username": "ann", "password_hash": "x"}))
        assert run(users.find_by_username("ann")).name == "Ann"
        assert run(users.find_by_username("Ann")) is None

    def test_count_admins(self, run, users):
        run(users.add({"name": "A", "username": "a", "role": UserRole.ADMIN}))
        run(users.add({"name": "B", "username": "b", "role": UserRole.USER}))
        run(users.add({"name": "C", "username": "c", "role": "admin"}))
        assert run(users.count_admins()) == 2


class TestCategoryRepository:

    def test_seed_if_empty(self, run, categories):
        """Test that defaults are added once."""
        assert run(categories.seed_if_empty(DEFAULT_CATEGORIES)) == 8
        assert run(categories.seed_if_empty(DEFAULT_CATEGORIES)) == 0
        assert len(run(categories.get_all())) == 8

    def test_seed_skips_non_empty_collection(self, run, categories):
        run(categories.add(NewCategory(name="Mine")))
        assert run(categories.seed_if_empty(DEFAULT_CATEGORIES)) == 0
        assert [c.name for c in run(categories.get_all())] == ["Mine"]


class TestExpenseRepository:

    def test_add_sets_updated_at(self, run, expenses):
        added = run(expenses.add(new_expense()))
        assert added.updated_at == added.created_at

    def test_update_refreshes_updated_at(self, run, expenses):
        """Test that edits move updatedAt but never createdAt or the owner."""
        added = run(expenses.add(new_expense()))
        updated = run(expenses.update(added.id, ExpensePatch(amount=Decimal("99"))))
        assert updated.amount == Decimal("99")
        assert updated.updated_at >= added.updated_at
        assert updated.created_at == added.created_at
        assert updated.user_id == added.user_id

    def test_update_rejects_invalid_result(self, run, expenses):
        """Test that a patch producing an invalid record raises."""
        added = run(expenses.add(new_expense()))
        with pytest.raises(ValueError):
            run(expenses.update(added.id, ExpensePatch.model_construct(amount=Decimal("-1"))))

    def test_list_for_user(self, run, expenses):
        run(expenses.add(new_expense(user_id="ann")))
        run(expenses.add(new_expense(user_id="budi")))
        run(expenses.add(new_expense(user_id="ann")))
        assert len(run(expenses.list_for_user("ann"))) == 2

    def test_count_by_category(self, run, expenses):
        run(expenses.add(new_expense(category_id="food")))
        run(expenses.add(new_expense(category_id="food")))
        run(expenses.add(new_expense(category_id="bills")))
        assert run(expenses.count_by_category("food")) == 2
        assert run(expenses.count_by_category("missing")) == 0

    def test_dangling_references_are_allowed(self, run, expenses):
        """Test that category and user ids are not checked on write."""
        added = run(expenses.add(new_expense(category_id="gone", user_id="nobody")))
        assert run(expenses.get(added.id)).category_id == "gone"
