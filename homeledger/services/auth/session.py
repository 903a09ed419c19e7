"""
Session Manager

A pass-through to the store under the "session" key. One slot, no
expiry: a session is valid until something clears it.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from homeledger.audit import AuditLogger
from homeledger.models.auth import Session
from homeledger.services.storage import JSONStore, StorageKeys


class SessionManager:

    def __init__(self, store: JSONStore, audit_logger: Optional[AuditLogger] = None):
        self._store = store
        self._audit = audit_logger or AuditLogger()

    async def save_session(self, session: Session) -> None:
        await self._store.write_json(StorageKeys.SESSION, session.to_storage())

    async def get_session(self) -> Optional[Session]:
        payload = await self._store.read_json(StorageKeys.SESSION)
        if payload is None:
            return None
        try:
            return Session.model_validate(payload)
        except PydanticValidationError as e:
            # An unreadable session is the same as being logged out.
            self._audit.log_storage_read_failed(StorageKeys.SESSION, str(e))
            return None

    async def clear_session(self) -> None:
        await self._store.remove(StorageKeys.SESSION)
