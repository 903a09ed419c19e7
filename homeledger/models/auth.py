"""
Session and Authentication Models

DESIGN DECISION: Login has one public failure shape (None) but several
internal causes. LoginResult keeps the cause as a typed outcome so logs
and tests can tell them apart while callers of login() cannot.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from homeledger.models.ledger import LedgerModel, User, UserRole, utc_now


class Session(LedgerModel):
    """
    The one persisted record identifying the logged-in user.

    A copy of the user's identity at login time; it is not refreshed
    if the user record changes later.
    """

    user_id: str
    username: str
    name: str
    role: UserRole
    login_time: datetime = Field(default_factory=utc_now)

    @classmethod
    def for_user(cls, user: User) -> "Session":
        return cls(
            user_id=user.id,
            username=user.username,
            name=user.name,
            role=user.role,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class LoginOutcome(str, Enum):
    """Why a login attempt ended the way it did."""
    SUCCESS = "success"
    UNKNOWN_USER = "unknown_user"
    MISSING_HASH = "missing_hash"
    INVALID_PASSWORD = "invalid_password"


class LoginResult(BaseModel):
    outcome: LoginOutcome
    session: Optional[Session] = None
    user_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == LoginOutcome.SUCCESS and self.session is not None


class InitState(str, Enum):
    """
    First-run state of the store.

    INITIALIZED_NO_USERS is never returned from a startup check; it is
    detected and repaired back to NOT_INITIALIZED.
    """
    NOT_INITIALIZED = "not_initialized"
    INITIALIZED_NO_USERS = "initialized_no_users"
    INITIALIZED = "initialized"


class SetupRequest(BaseModel):
    """Form input for the first-run setup screen."""

    name: str = Field(default="Administrator")
    username: str = Field(default="admin")
    password: str
    confirm_password: str


class AppState(BaseModel):
    """What the UI needs to pick a screen."""

    initialized: bool
    session: Optional[Session] = None

    @property
    def current_user_role(self) -> Optional[UserRole]:
        return self.session.role if self.session else None
