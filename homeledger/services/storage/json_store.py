"""
JSON Store Adapter

The one place where storage failures are decided. Policy: FAIL SOFT.
- A read that fails (I/O error, invalid JSON) returns the caller's default
- A write that fails returns False
- Nothing raises to the caller; every failure is audited

A missing or corrupt collection degrades to "no data" rather than taking
the app down with it.
"""

import asyncio
import json
from typing import Any, Optional

from homeledger.audit import AuditLogger
from homeledger.services.storage.interface import KeyValueBackend, StorageError


class JSONStore:
    """
    Fail-soft JSON layer over a KeyValueBackend.

    Also owns one asyncio.Lock per key. Repositories hold the lock for
    a whole read-modify-write cycle so concurrent coroutines cannot
    lose each other's writes.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._audit = audit_logger or AuditLogger()
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    # -------------------------------------------------------------------------
    # Raw strings
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._backend.get(key)
        except StorageError as e:
            self._audit.log_storage_read_failed(key, str(e))
            return None

    async def set(self, key: str, value: str) -> bool:
        try:
            await self._backend.set(key, value)
            return True
        except StorageError as e:
            self._audit.log_storage_write_failed(key, str(e))
            return False

    async def remove(self, key: str) -> bool:
        try:
            await self._backend.remove(key)
            return True
        except StorageError as e:
            self._audit.log_storage_write_failed(key, str(e))
            return False

    # -------------------------------------------------------------------------
    # JSON values
    # -------------------------------------------------------------------------

    async def read_json(self, key: str, default: Any = None) -> Any:
        """Decode the value under key, or return default if absent or unreadable."""
        raw = await self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            self._audit.log_storage_read_failed(key, f"Corrupted JSON: {e}")
            return default

    async def write_json(self, key: str, value: Any) -> bool:
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self._audit.log_storage_write_failed(key, f"Not JSON serializable: {e}")
            return False
        return await self.set(key, raw)
