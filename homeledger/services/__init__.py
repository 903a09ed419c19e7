"""Services package."""

from homeledger.services.storage import (
    CategoryRepository,
    ExpenseRepository,
    FileKeyValueBackend,
    InMemoryKeyValueBackend,
    JSONStore,
    KeyValueBackend,
    StorageError,
    StorageKeys,
    UserRepository,
)
from homeledger.services.auth import (
    AuthService,
    PasswordHasher,
    SessionManager,
)
from homeledger.services.setup import (
    DEFAULT_CATEGORIES,
    InitializationSequencer,
)

__all__ = [
    # Storage services
    "CategoryRepository",
    "ExpenseRepository",
    "FileKeyValueBackend",
    "InMemoryKeyValueBackend",
    "JSONStore",
    "KeyValueBackend",
    "StorageError",
    "StorageKeys",
    "UserRepository",
    # Auth services
    "AuthService",
    "PasswordHasher",
    "SessionManager",
    # First run
    "DEFAULT_CATEGORIES",
    "InitializationSequencer",
]
