"""
Authentication Service

State machine over {LoggedOut, LoggedIn}, where "LoggedIn" means a
Session record exists in the store.

CRITICAL: login() has exactly one failure shape, None. Whether the
username was unknown, the stored hash was missing or the password was
wrong is only visible through authenticate()'s LoginResult and the audit
log. This keeps the login form from confirming which usernames exist.

Password hashes never leave this module: every user returned to a caller
is a PublicUser.
"""

import asyncio
from typing import Optional
from uuid import UUID

from homeledger.audit import AuditLogger
from homeledger.exceptions import (
    DuplicateUsernameError,
    PermissionDeniedError,
    ValidationError,
)
from homeledger.models.auth import LoginOutcome, LoginResult, Session
from homeledger.models.ledger import NewUser, PublicUser, UserRole
from homeledger.services.auth.passwords import PasswordHasher
from homeledger.services.auth.session import SessionManager
from homeledger.services.storage import UserRepository
from homeledger.validation import InputValidator, ensure_valid


class AuthService:
    """Login, logout, session issuance and account management."""

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionManager,
        hasher: Optional[PasswordHasher] = None,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = users
        self._sessions = sessions
        self._hasher = hasher or PasswordHasher()
        self._validator = validator or InputValidator()
        self._audit = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Passwords
    # -------------------------------------------------------------------------

    async def hash_password(self, password: str) -> str:
        """Hash in a worker thread; raises ValidationError for empty input."""
        return await asyncio.to_thread(self._hasher.hash, password)

    async def verify_password(self, password: str, hashed_password: Optional[str]) -> bool:
        """Never raises; malformed input verifies as False."""
        if not hashed_password:
            return False
        return await asyncio.to_thread(self._hasher.verify, password, hashed_password)

    # -------------------------------------------------------------------------
    # Login / logout
    # -------------------------------------------------------------------------

    async def authenticate(self, username: str, password: str) -> LoginResult:
        """
        Check credentials and, on success, persist a new Session.

        Returns a LoginResult whose outcome names the exact failure cause.
        """
        user = await self._users.find_by_username(username)

        if user is None:
            result = LoginResult(outcome=LoginOutcome.UNKNOWN_USER)
        elif not user.password_hash:
            result = LoginResult(outcome=LoginOutcome.MISSING_HASH, user_id=user.id)
        elif not await self.verify_password(password, user.password_hash):
            result = LoginResult(outcome=LoginOutcome.INVALID_PASSWORD, user_id=user.id)
        else:
            session = Session.for_user(user)
            await self._sessions.save_session(session)
            self._audit.log_login_succeeded(user.id, user.username)
            return LoginResult(outcome=LoginOutcome.SUCCESS, session=session, user_id=user.id)

        self._audit.log_login_failed(username, result.outcome.value, result.user_id)
        return result

    async def login(self, username: str, password: str) -> Optional[Session]:
        """Return the new Session, or None for any failure."""
        result = await self.authenticate(username, password)
        return result.session if result.succeeded else None

    async def logout(self) -> None:
        session = await self._sessions.get_session()
        await self._sessions.clear_session()
        self._audit.log_logout(session.user_id if session else None)

    async def current_session(self) -> Optional[Session]:
        return await self._sessions.get_session()

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def create_user(
        self,
        data: NewUser,
        correlation_id: Optional[UUID] = None,
    ) -> PublicUser:
        """
        Create a user and return it without its password hash.

        Raises:
            ValidationError: Missing fields or a too-short password
            DuplicateUsernameError: The username is taken
        """
        ensure_valid(
            self._validator.validate_new_user(data.name, data.username, data.password, data.role),
            "Cannot create user",
        )
        if await self._users.find_by_username(data.username) is not None:
            raise DuplicateUsernameError(data.username)

        password_hash = await self.hash_password(data.password)
        user = await self._users.add({
            "name": data.name,
            "username": data.username,
            "password_hash": password_hash,
            "role": data.role,
        })

        self._audit.log_user_created(user.id, user.username, user.role.value, correlation_id)
        return user.to_public()

    def require_admin(self, actor: Optional[Session], action: str = "admin action") -> Session:
        """Return actor if it is an admin session, else raise PermissionDeniedError."""
        if actor is None or actor.role != UserRole.ADMIN:
            self._audit.log_permission_denied(actor.user_id if actor else None, action)
            raise PermissionDeniedError(f"Only administrators can perform: {action}")
        return actor

    async def list_users(self, actor: Optional[Session]) -> list[PublicUser]:
        self.require_admin(actor, "list users")
        return [user.to_public() for user in await self._users.get_all()]

    async def create_user_as(self, actor: Optional[Session], data: NewUser) -> PublicUser:
        self.require_admin(actor, "create user")
        return await self.create_user(data)

    async def delete_user(self, actor: Optional[Session], user_id: str) -> None:
        """
        Delete a user account. Deleting an unknown id is a no-op.

        Raises:
            PermissionDeniedError: actor is not an admin
            ValidationError: deleting yourself or the last admin
        """
        admin = self.require_admin(actor, "delete user")
        if user_id == admin.user_id:
            raise ValidationError.for_field("user_id", "You cannot delete your own account")

        target = await self._users.get(user_id)
        if target is None:
            return
        if target.role == UserRole.ADMIN and await self._users.count_admins() <= 1:
            raise ValidationError.for_field("user_id", "At least one administrator must remain")

        await self._users.delete(user_id)
        self._audit.log_user_deleted(user_id, admin.user_id)
