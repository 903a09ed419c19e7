"""
Storage Services Package

Provides the key-value backend interface, concrete backends, the
fail-soft JSON adapter and the entity repositories built on it.
"""

from homeledger.services.storage.interface import (
    InvalidKeyError,
    KeyValueBackend,
    StorageError,
    StorageKeys,
)
from homeledger.services.storage.backends import (
    FileKeyValueBackend,
    InMemoryKeyValueBackend,
)
from homeledger.services.storage.json_store import JSONStore
from homeledger.services.storage.repositories import (
    CategoryRepository,
    CollectionRepository,
    ExpenseRepository,
    UserRepository,
)

__all__ = [
    # Interfaces
    "KeyValueBackend",
    "StorageKeys",
    # Exceptions
    "InvalidKeyError",
    "StorageError",
    # Backends
    "FileKeyValueBackend",
    "InMemoryKeyValueBackend",
    # Adapter and repositories
    "JSONStore",
    "CategoryRepository",
    "CollectionRepository",
    "ExpenseRepository",
    "UserRepository",
]
