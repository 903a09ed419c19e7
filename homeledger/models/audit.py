"""
Audit Models for HomeLedger

Diagnostic events for the parts of the system that deliberately hide
failures from their callers:
1. The store adapter turns I/O and parse errors into "no data"
2. Login turns every failure cause into the same None

The events are where those hidden causes stay visible.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from homeledger.models.ledger import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    USER_CREATED = "user_created"
    USER_DELETED = "user_deleted"
    PERMISSION_DENIED = "permission_denied"

    # Authentication
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # First run
    CATEGORIES_SEEDED = "categories_seeded"
    SETUP_COMPLETED = "setup_completed"
    INITIALIZATION_REPAIRED = "initialization_repaired"

    # Storage
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"
    RECORD_SKIPPED = "record_skipped"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'store_key')"
    )
    entity_id: Optional[str] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Groups the events of one multi-step flow (e.g., first-run setup)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_failed("admin", "invalid_password")
        event = AuditEventBuilder.storage_read_failed("users", "bad JSON")
    """

    @staticmethod
    def user_created(
        user_id: str,
        username: str,
        role: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"User created: {username}",
            details={"username": username, "role": role},
            is_user_action=True,
        )

    @staticmethod
    def user_deleted(user_id: str, actor_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_DELETED,
            entity_type="user",
            entity_id=user_id,
            description="User deleted",
            details={"actor_id": actor_id},
            is_user_action=True,
        )

    @staticmethod
    def permission_denied(actor_id: Optional[str], action: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERMISSION_DENIED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=actor_id,
            description=f"Action refused: {action}",
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(user_id: str, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            description=f"Login succeeded: {username}",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        username: str,
        outcome: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            description=f"Login failed: {outcome}",
            details={"username": username, "outcome": outcome},
            is_user_action=True,
        )

    @staticmethod
    def logout(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            entity_type="user",
            entity_id=user_id,
            description="Session cleared",
            is_user_action=True,
        )

    @staticmethod
    def categories_seeded(count: int, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_SEEDED,
            entity_type="store_key",
            entity_id="categories",
            correlation_id=correlation_id,
            description=f"Seeded {count} default categories",
            details={"count": count},
        )

    @staticmethod
    def setup_completed(admin_id: str, correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETUP_COMPLETED,
            entity_type="user",
            entity_id=admin_id,
            correlation_id=correlation_id,
            description="First-run setup completed",
            is_user_action=True,
        )

    @staticmethod
    def initialization_repaired(
        description: str = "Store marked initialized but has no users; flag reset",
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INITIALIZATION_REPAIRED,
            severity=AuditSeverity.WARNING,
            entity_type="store_key",
            entity_id="initialized",
            description=description,
        )

    @staticmethod
    def storage_read_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store_key",
            entity_id=key,
            description=f"Could not read '{key}', treating as absent",
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store_key",
            entity_id=key,
            description=f"Could not write '{key}'",
            error_message=error_message,
        )

    @staticmethod
    def record_skipped(key: str, index: int, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="store_key",
            entity_id=key,
            description=f"Skipped invalid record #{index} in '{key}'",
            details={"index": index},
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
