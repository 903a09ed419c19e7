"""
Initialization Sequencer

First-run setup is three writes to three different keys:

    1. seed default categories   (categories)
    2. create the admin user     (users)
    3. set the flag              (initialized = "true")

They are NOT atomic. A crash between them leaves one of two broken
states, and check_startup() repairs both on every cold start:

    flag set, no users      -> flag cleared, back to first-run setup
    admin saved, no flag    -> flag set, straight to login

A failed flag write raises SetupIncompleteError instead of reporting
success.

Seeding only happens into an empty category collection, so running setup
again after a partial attempt never duplicates categories.
"""

from typing import Optional

from homeledger.audit import AuditLogger, create_correlation_id
from homeledger.exceptions import AlreadyInitializedError, SetupIncompleteError
from homeledger.models.auth import InitState, SetupRequest
from homeledger.models.ledger import NewCategory, NewUser, PublicUser, UserRole
from homeledger.services.auth import AuthService
from homeledger.services.storage import (
    CategoryRepository,
    JSONStore,
    StorageKeys,
    UserRepository,
)
from homeledger.validation import InputValidator, ensure_valid


INITIALIZED_VALUE = "true"

ADMIN_WITHOUT_FLAG = "Store has an admin but no initialized flag; flag set"

DEFAULT_CATEGORIES: tuple[NewCategory, ...] = (
    NewCategory(name="Food & Drinks", color="#FF6384"),
    NewCategory(name="Transportation", color="#36A2EB"),
    NewCategory(name="Shopping", color="#FFCE56"),
    NewCategory(name="Bills", color="#4BC0C0"),
    NewCategory(name="Health", color="#9966FF"),
    NewCategory(name="Education", color="#FF9F40"),
    NewCategory(name="Entertainment", color="#FF6384"),
    NewCategory(name="Other", color="#C9CBCF"),
)


class InitializationSequencer:
    """Decides between first-run setup and the login flow."""

    def __init__(
        self,
        store: JSONStore,
        users: UserRepository,
        categories: CategoryRepository,
        auth: AuthService,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._users = users
        self._categories = categories
        self._auth = auth
        self._validator = validator or InputValidator()
        self._audit = audit_logger or AuditLogger()

    async def is_initialized(self) -> bool:
        return await self._store.get(StorageKeys.INITIALIZED) == INITIALIZED_VALUE

    async def current_state(self) -> InitState:
        """Report the state without repairing anything."""
        if not await self.is_initialized():
            return InitState.NOT_INITIALIZED
        if not await self._users.get_all():
            return InitState.INITIALIZED_NO_USERS
        return InitState.INITIALIZED

    async def check_startup(self) -> InitState:
        """
        Cold-start check.

        An initialized store without users is a half-finished setup: the
        flag is cleared and NOT_INITIALIZED is returned. A store with an
        admin but no flag crashed after the admin was saved: the flag is
        set and INITIALIZED is returned, so the admin can log in.
        """
        state = await self.current_state()
        if state == InitState.INITIALIZED_NO_USERS:
            await self._store.remove(StorageKeys.INITIALIZED)
            self._audit.log_initialization_repaired()
            return InitState.NOT_INITIALIZED
        if state == InitState.NOT_INITIALIZED and await self._users.count_admins() > 0:
            if await self._store.set(StorageKeys.INITIALIZED, INITIALIZED_VALUE):
                self._audit.log_initialization_repaired(ADMIN_WITHOUT_FLAG)
                return InitState.INITIALIZED
        return state

    async def run_first_run_setup(self, request: SetupRequest) -> PublicUser:
        """
        Seed categories, create the admin, then mark the store initialized.

        Raises:
            AlreadyInitializedError: The store is initialized and has users,
                or an admin already exists from an earlier attempt
            ValidationError: Bad form input or a taken username
            SetupIncompleteError: The initialized flag could not be written
        """
        if await self.current_state() == InitState.INITIALIZED:
            raise AlreadyInitializedError("HomeLedger is already set up")

        ensure_valid(
            self._validator.validate_setup(
                request.name, request.username, request.password, request.confirm_password
            ),
            "Setup failed",
        )
        admin_data = NewUser(
            name=request.name,
            username=request.username,
            password=request.password,
            role=UserRole.ADMIN,
        )

        if await self._users.count_admins() > 0:
            await self._mark_initialized()
            self._audit.log_initialization_repaired(ADMIN_WITHOUT_FLAG)
            raise AlreadyInitializedError(
                "An administrator already exists; log in with that account"
            )

        correlation_id = create_correlation_id()

        seeded = await self._categories.seed_if_empty(DEFAULT_CATEGORIES)
        if seeded:
            self._audit.log_categories_seeded(seeded, correlation_id)

        admin = await self._auth.create_user(admin_data, correlation_id=correlation_id)

        await self._mark_initialized()
        self._audit.log_setup_completed(admin.id, correlation_id)
        return admin

    async def _mark_initialized(self) -> None:
        if not await self._store.set(StorageKeys.INITIALIZED, INITIALIZED_VALUE):
            raise SetupIncompleteError(
                "Could not save the setup state; restart HomeLedger and log in"
            )
