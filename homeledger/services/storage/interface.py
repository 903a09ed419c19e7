"""
Abstract Key-Value Storage Interface

DESIGN DECISION: Everything HomeLedger persists is a JSON string under
one of a handful of fixed keys. The backend only has to move strings:
1. A file-per-key backend for real use
2. An in-memory backend for tests
3. Anything else (SQLite, a keyring) can be added without touching
   repositories

Backends raise StorageError. They do NOT decide what a failure means;
the JSONStore adapter above them does.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageKeys:
    """The fixed storage slots."""
    USERS = "users"
    CATEGORIES = "categories"
    EXPENSES = "expenses"
    SESSION = "session"
    INITIALIZED = "initialized"

    ALL = (USERS, CATEGORIES, EXPENSES, SESSION, INITIALIZED)


class KeyValueBackend(ABC):
    """
    Abstract interface for a persistent string-keyed store.

    Operations are atomic per key. There is no cross-key atomicity.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the medium cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store value under key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove key. Removing an absent key is not an error.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InvalidKeyError(StorageError):
    """Key contains characters the backend cannot store."""
    pass
