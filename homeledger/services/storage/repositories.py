"""
Entity Repositories

One repository per collection (users, categories, expenses). Each
collection is a single JSON array under a fixed key, so every mutation
is a whole-collection read-modify-write:

    lock -> read array -> change in memory -> write array -> unlock

TRADEOFFS:
- Fine for a household's worth of records, not for large data
- No cross-collection atomicity (see the initialization sequencer)
- Records that no longer validate are skipped on read but written back
  untouched, so one bad record never destroys its neighbours
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar, Generic, Iterable, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from homeledger.audit import AuditLogger
from homeledger.models.ledger import (
    Category,
    CategoryPatch,
    Expense,
    ExpensePatch,
    LedgerModel,
    PatchModel,
    User,
    UserPatch,
    UserRole,
    new_id,
    utc_now,
)
from homeledger.services.storage.interface import StorageKeys
from homeledger.services.storage.json_store import JSONStore


RecordT = TypeVar("RecordT", bound=LedgerModel)
PatchT = TypeVar("PatchT", bound=PatchModel)

# Fields the repository owns; callers can never supply them to add().
SYSTEM_FIELDS = frozenset({
    "id", "created_at", "updated_at", "createdAt", "updatedAt",
})

RecordInput = Union[BaseModel, Mapping[str, Any]]


class CollectionRepository(Generic[RecordT, PatchT]):
    """CRUD over one JSON array in the store."""

    key: ClassVar[str]
    model: ClassVar[type[LedgerModel]]

    def __init__(self, store: JSONStore, audit_logger: Optional[AuditLogger] = None):
        self._store = store
        self._audit = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def get_all(self) -> list[RecordT]:
        records, _ = await self._load()
        return records

    async def save_all(self, records: Iterable[RecordT]) -> bool:
        """Replace the whole collection. Returns False if the write failed."""
        async with self._store.lock_for(self.key):
            return await self._write(list(records), [])

    async def get(self, record_id: str) -> Optional[RecordT]:
        for record in await self.get_all():
            if record.id == record_id:
                return record
        return None

    async def add(self, data: RecordInput) -> RecordT:
        """
        Create a record from data.

        id and createdAt are always assigned here; values for them in
        data are ignored.

        Storage is fail-soft: if the write fails it is audited by the
        store and the record is still returned, but a later get_all()
        will not contain it.
        """
        async with self._store.lock_for(self.key):
            records, rejects = await self._load()
            record = self._build(self._fields_of(data), utc_now())
            records.append(record)
            await self._write(records, rejects)
            return record

    async def update(self, record_id: str, patch: PatchT) -> Optional[RecordT]:
        """
        Apply patch to the record with record_id.

        Returns None, without writing, if there is no such record. A
        failed write is audited and the updated record is still returned.
        Raises pydantic.ValidationError if the patched record is invalid.
        """
        async with self._store.lock_for(self.key):
            records, rejects = await self._load()
            for index, record in enumerate(records):
                if record.id == record_id:
                    updated = self._touch(patch.apply_to(record))
                    records[index] = updated
                    await self._write(records, rejects)
                    return updated
            return None

    async def delete(self, record_id: str) -> None:
        """Hard-delete a record. Unknown ids are a no-op."""
        async with self._store.lock_for(self.key):
            records, rejects = await self._load()
            remaining = [record for record in records if record.id != record_id]
            if len(remaining) != len(records):
                await self._write(remaining, rejects)

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def _build(self, fields: dict[str, Any], now: datetime) -> RecordT:
        return self.model.model_validate({**fields, "id": new_id(), "created_at": now})

    def _touch(self, record: RecordT) -> RecordT:
        return record

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _fields_of(data: RecordInput) -> dict[str, Any]:
        if isinstance(data, BaseModel):
            fields = data.model_dump()
        else:
            fields = dict(data)
        return {name: value for name, value in fields.items() if name not in SYSTEM_FIELDS}

    async def _load(self) -> tuple[list[RecordT], list[Any]]:
        """Return (valid records, raw entries that failed validation)."""
        payload = await self._store.read_json(self.key, default=[])
        if not isinstance(payload, list):
            self._audit.log_storage_read_failed(
                self.key, f"Expected a JSON array, got {type(payload).__name__}"
            )
            return [], []

        records: list[RecordT] = []
        rejects: list[Any] = []
        for index, raw in enumerate(payload):
            try:
                records.append(self.model.model_validate(raw))
            except PydanticValidationError as e:
                self._audit.log_record_skipped(self.key, index, str(e))
                rejects.append(raw)
        return records, rejects

    async def _write(self, records: list[RecordT], rejects: list[Any]) -> bool:
        """Write the collection back; False if the store could not save it."""
        payload = [record.to_storage() for record in records] + rejects
        return await self._store.write_json(self.key, payload)


class UserRepository(CollectionRepository[User, UserPatch]):
    key = StorageKeys.USERS
    model = User

    async def find_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive username lookup."""
        for user in await self.get_all():
            if user.username == username:
                return user
        return None

    async def count_admins(self) -> int:
        return sum(1 for user in await self.get_all() if user.role == UserRole.ADMIN)


class CategoryRepository(CollectionRepository[Category, CategoryPatch]):
    key = StorageKeys.CATEGORIES
    model = Category

    async def seed_if_empty(self, defaults: Iterable[RecordInput]) -> int:
        """
        Add defaults only when the collection is empty.

        Returns the number of categories added (0 if any already existed),
        which makes re-running first-run setup safe.
        """
        async with self._store.lock_for(self.key):
            records, rejects = await self._load()
            if records or rejects:
                return 0
            now = utc_now()
            seeded = [self._build(self._fields_of(item), now) for item in defaults]
            await self._write(seeded, [])
            return len(seeded)


class ExpenseRepository(CollectionRepository[Expense, ExpensePatch]):
    key = StorageKeys.EXPENSES
    model = Expense

    def _build(self, fields: dict[str, Any], now: datetime) -> Expense:
        return Expense.model_validate(
            {**fields, "id": new_id(), "created_at": now, "updated_at": now}
        )

    def _touch(self, record: Expense) -> Expense:
        return record.model_copy(update={"updated_at": utc_now()})

    async def list_for_user(self, user_id: str) -> list[Expense]:
        return [expense for expense in await self.get_all() if expense.user_id == user_id]

    async def count_by_category(self, category_id: str) -> int:
        return sum(1 for expense in await self.get_all() if expense.category_id == category_id)
