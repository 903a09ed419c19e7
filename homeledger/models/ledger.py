"""
Core Data Models for HomeLedger

These models define the schemas for everything persisted in the
key-value store. They are designed to:
1. Keep the on-disk JSON shape (camelCase keys) stable
2. Validate records on the way in AND on the way out of storage
3. Separate what a caller may change (patches) from what the system owns

DESIGN DECISION: Persisted records use camelCase aliases (passwordHash,
createdAt, categoryId) while Python code uses snake_case attributes.
Both spellings are accepted when loading.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


# Alias so a field may be named "date" without shadowing its own type.
ExpenseDate = date

HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}){1,2}$"
DEFAULT_CATEGORY_COLOR = "#C9CBCF"


def new_id() -> str:
    """Generate an opaque record id (UUIDv4)."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, Enum):
    """
    Account roles.

    Admins manage users and categories; everyone can log expenses.
    """
    ADMIN = "admin"
    USER = "user"


# =============================================================================
# BASE
# =============================================================================

class LedgerModel(BaseModel):
    """Base for all persisted records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_storage(self) -> dict[str, Any]:
        """Serialize to the JSON-native, camelCase form kept in storage."""
        return self.model_dump(mode="json", by_alias=True)


class PatchModel(LedgerModel):
    """
    Base for partial updates.

    Only fields that were explicitly set are applied. An explicit None
    is ignored unless the field is listed in nullable_fields.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in self.nullable_fields
        }

    def apply_to(self, record: LedgerModel) -> LedgerModel:
        """Return a re-validated copy of record with this patch applied."""
        merged = {**record.model_dump(), **self.changes()}
        return type(record).model_validate(merged)


# =============================================================================
# USERS
# =============================================================================

class PublicUser(LedgerModel):
    """
    A user as seen by UI-facing code.

    CRITICAL: Never carries the password hash.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Login name, unique and case-sensitive"
    )
    role: UserRole = Field(default=UserRole.USER)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class User(PublicUser):
    """A stored user record."""

    password_hash: Optional[str] = Field(
        default=None,
        description="bcrypt hash; None only for damaged legacy records"
    )

    def to_public(self) -> PublicUser:
        return PublicUser.model_validate(self.model_dump(exclude={"password_hash"}))


class NewUser(BaseModel):
    """Input for creating a user. The password is plaintext here only."""

    model_config = ConfigDict(str_strip_whitespace=False)

    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=50)
    password: str
    role: UserRole = Field(default=UserRole.USER)

    @field_validator('name', 'username')
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class UserPatch(PatchModel):
    """Mutable user fields. Passwords change through the auth service."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[UserRole] = None


# =============================================================================
# CATEGORIES
# =============================================================================

class Category(LedgerModel):
    """An expense category. Names are not required to be unique."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR,
        pattern=HEX_COLOR_PATTERN,
        description="CSS hex color used by charts"
    )
    created_at: datetime = Field(default_factory=utc_now)


class NewCategory(LedgerModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN)


class CategoryPatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


# =============================================================================
# EXPENSES
# =============================================================================

def _coerce_calendar_date(value: Any) -> Any:
    """
    Accept full ISO timestamps for calendar dates.

    Older records store the expense date as a timestamp
    ("2024-05-01T09:30:00.000Z"); only the date part is meaningful.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class Expense(LedgerModel):
    """
    A single logged expense.

    category_id and user_id are references that are NOT checked on write;
    readers must tolerate ids that no longer resolve.
    """

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, description="Positive amount")
    category_id: str = Field(..., min_length=1)
    date: ExpenseDate = Field(..., description="Calendar date the money was spent")
    notes: Optional[str] = Field(default=None, max_length=1000)
    user_id: str = Field(..., min_length=1, description="Owner")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_calendar_date(v)


class NewExpense(LedgerModel):
    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    category_id: str = Field(..., min_length=1)
    date: ExpenseDate
    notes: Optional[str] = Field(default=None, max_length=1000)
    user_id: str = Field(..., min_length=1)

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_calendar_date(v)


class ExpensePatch(PatchModel):
    """Mutable expense fields. The owner never changes."""

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"notes"})

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    category_id: Optional[str] = Field(default=None, min_length=1)
    date: Optional[ExpenseDate] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _coerce_calendar_date(v)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in form input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
    )
