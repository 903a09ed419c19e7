"""
Main Orchestrator for HomeLedger

This module wires every component to one store and defines the
flows the screens call:
1. Startup (repair check → setup or login)
2. Expenses (validate → permission check → save)
3. Categories (admin only)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Form input is validated before it reaches a repository
- Users only change their own expenses; admins change anything
- Category and user management require an admin session

Repositories and the store stay permission-free; the checks live here.
"""

from typing import Any, Optional

from homeledger.audit import AuditLogger, configure_logging
from homeledger.config import Settings, get_settings
from homeledger.exceptions import PermissionDeniedError
from homeledger.models.auth import AppState, InitState, Session
from homeledger.models.ledger import (
    Category,
    CategoryPatch,
    Expense,
    ExpensePatch,
    NewCategory,
    NewExpense,
)
from homeledger.queries import ReportService, can_edit
from homeledger.services.auth import AuthService, PasswordHasher, SessionManager
from homeledger.services.setup import InitializationSequencer
from homeledger.services.storage import (
    CategoryRepository,
    ExpenseRepository,
    FileKeyValueBackend,
    JSONStore,
    KeyValueBackend,
    UserRepository,
)
from homeledger.validation import InputValidator, ensure_valid


class ExpenseFlow:
    """
    Add, edit and delete expenses on behalf of a session.

    The owner of a new expense is always the acting session's user.
    """

    def __init__(
        self,
        expenses: ExpenseRepository,
        validator: InputValidator,
        audit_logger: AuditLogger,
    ):
        self._expenses = expenses
        self._validator = validator
        self._audit = audit_logger

    def _require_session(self, actor: Optional[Session], action: str) -> Session:
        if actor is None:
            self._audit.log_permission_denied(None, action)
            raise PermissionDeniedError(f"Log in to {action}")
        return actor

    async def add_expense(
        self,
        actor: Optional[Session],
        title: Any,
        amount: Any,
        category_id: Any,
        expense_date: Any,
        notes: Optional[str] = None,
    ) -> Expense:
        session = self._require_session(actor, "add expense")
        ensure_valid(
            self._validator.validate_expense(title, amount, category_id, expense_date, notes),
            "Cannot save expense",
        )
        return await self._expenses.add(NewExpense(
            title=str(title).strip(),
            amount=amount,
            category_id=category_id,
            date=expense_date,
            notes=notes or None,
            user_id=session.user_id,
        ))

    async def update_expense(
        self,
        actor: Optional[Session],
        expense_id: str,
        patch: ExpensePatch,
    ) -> Optional[Expense]:
        """
        Apply patch to an expense the actor may edit.

        Returns None if the expense does not exist.
        """
        session = self._require_session(actor, "edit expense")
        current = await self._expenses.get(expense_id)
        if current is None:
            return None
        self._check_owner(current, session, "edit expense")

        merged = patch.apply_to(current)
        ensure_valid(
            self._validator.validate_expense(
                merged.title, merged.amount, merged.category_id, merged.date, merged.notes
            ),
            "Cannot save expense",
        )
        return await self._expenses.update(expense_id, patch)

    async def delete_expense(self, actor: Optional[Session], expense_id: str) -> None:
        """Deleting an unknown id is a no-op."""
        session = self._require_session(actor, "delete expense")
        current = await self._expenses.get(expense_id)
        if current is None:
            return
        self._check_owner(current, session, "delete expense")
        await self._expenses.delete(expense_id)

    def _check_owner(self, expense: Expense, session: Session, action: str) -> None:
        if not can_edit(expense, session):
            self._audit.log_permission_denied(session.user_id, action)
            raise PermissionDeniedError("You can only change your own expenses")


class CategoryFlow:
    """
    Admin-only category management.

    Deleting a category leaves its expenses in place; reports show
    them under "Unknown".
    """

    def __init__(
        self,
        categories: CategoryRepository,
        auth: AuthService,
        validator: InputValidator,
    ):
        self._categories = categories
        self._auth = auth
        self._validator = validator

    async def list_categories(self) -> list[Category]:
        return await self._categories.get_all()

    async def add_category(
        self,
        actor: Optional[Session],
        name: Any,
        color: Optional[str] = None,
    ) -> Category:
        self._auth.require_admin(actor, "add category")
        ensure_valid(self._validator.validate_category(name, color), "Cannot add category")
        data = {"name": str(name).strip()}
        if color:
            data["color"] = color
        return await self._categories.add(NewCategory(**data))

    async def update_category(
        self,
        actor: Optional[Session],
        category_id: str,
        patch: CategoryPatch,
    ) -> Optional[Category]:
        self._auth.require_admin(actor, "edit category")
        current = await self._categories.get(category_id)
        if current is None:
            return None
        merged = patch.apply_to(current)
        ensure_valid(
            self._validator.validate_category(merged.name, merged.color),
            "Cannot save category",
        )
        return await self._categories.update(category_id, patch)

    async def delete_category(self, actor: Optional[Session], category_id: str) -> None:
        self._auth.require_admin(actor, "delete category")
        await self._categories.delete(category_id)


class AppComponents:
    """Everything the UI needs, sharing one store and one audit logger."""

    def __init__(
        self,
        store: JSONStore,
        settings: Settings,
        audit_logger: AuditLogger,
    ):
        self.settings = settings
        self.store = store
        self.audit = audit_logger

        auth_settings = settings.auth
        self.validator = InputValidator(min_password_length=auth_settings.min_password_length)

        self.users = UserRepository(store, audit_logger)
        self.categories = CategoryRepository(store, audit_logger)
        self.expenses = ExpenseRepository(store, audit_logger)
        self.sessions = SessionManager(store, audit_logger)

        self.auth = AuthService(
            users=self.users,
            sessions=self.sessions,
            hasher=PasswordHasher(rounds=auth_settings.bcrypt_rounds),
            validator=self.validator,
            audit_logger=audit_logger,
        )
        self.sequencer = InitializationSequencer(
            store=store,
            users=self.users,
            categories=self.categories,
            auth=self.auth,
            validator=self.validator,
            audit_logger=audit_logger,
        )
        self.reports = ReportService(
            self.expenses,
            self.categories,
            recent_limit=settings.app.recent_expenses_limit,
        )
        self.expense_flow = ExpenseFlow(self.expenses, self.validator, audit_logger)
        self.category_flow = CategoryFlow(self.categories, self.auth, self.validator)

    async def startup(self) -> AppState:
        """Cold start: run the repair check, then report the state."""
        init_state = await self.sequencer.check_startup()
        return await self._state_for(init_state)

    async def state(self) -> AppState:
        """Current state without repairing anything."""
        return await self._state_for(await self.sequencer.current_state())

    async def _state_for(self, init_state: InitState) -> AppState:
        if init_state != InitState.INITIALIZED:
            return AppState(initialized=False)
        return AppState(initialized=True, session=await self.auth.current_session())


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[KeyValueBackend] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to the cached environment settings.
        backend: Key-value backend. Defaults to one JSON file per key
                 under the configured data directory. Pass an
                 InMemoryKeyValueBackend for tests.
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    audit_logger = AuditLogger()
    if backend is None:
        backend = FileKeyValueBackend(settings.storage.data_dir)

    return AppComponents(JSONStore(backend, audit_logger), settings, audit_logger)


__all__ = [
    "AppComponents",
    "CategoryFlow",
    "ExpenseFlow",
    "create_app_components",
]
