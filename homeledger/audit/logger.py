"""
Audit Logger

DESIGN DECISION: Every hidden failure and every account change is logged.
This provides:
1. A way to tell "wrong password" from "unknown user" after the fact
2. Evidence when a collection silently read as empty
3. A record of first-run setup and its repairs

The audit logger:
- Writes structured JSON lines through structlog
- Never raises; a logging problem must not change app behaviour
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from homeledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)


class AuditLogger:
    """Central audit logging service."""

    def __init__(self, name: str = "homeledger.audit"):
        self._logger = structlog.get_logger(name)

    def log(self, event: AuditEvent) -> None:
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_user_created(
        self,
        user_id: str,
        username: str,
        role: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.user_created(
            user_id=user_id,
            username=username,
            role=role,
            correlation_id=correlation_id,
        ))

    def log_user_deleted(self, user_id: str, actor_id: str) -> None:
        self.log(AuditEventBuilder.user_deleted(user_id=user_id, actor_id=actor_id))

    def log_permission_denied(self, actor_id: Optional[str], action: str) -> None:
        self.log(AuditEventBuilder.permission_denied(actor_id=actor_id, action=action))

    def log_login_succeeded(self, user_id: str, username: str) -> None:
        self.log(AuditEventBuilder.login_succeeded(user_id=user_id, username=username))

    def log_login_failed(
        self,
        username: str,
        outcome: str,
        user_id: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.login_failed(
            username=username,
            outcome=outcome,
            user_id=user_id,
        ))

    def log_logout(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.logout(user_id=user_id))

    def log_categories_seeded(self, count: int, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.categories_seeded(count=count, correlation_id=correlation_id))

    def log_setup_completed(self, admin_id: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.setup_completed(admin_id=admin_id, correlation_id=correlation_id))

    def log_initialization_repaired(self, description: Optional[str] = None) -> None:
        if description is None:
            self.log(AuditEventBuilder.initialization_repaired())
        else:
            self.log(AuditEventBuilder.initialization_repaired(description))

    def log_storage_read_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_read_failed(key=key, error_message=error_message))

    def log_storage_write_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_write_failed(key=key, error_message=error_message))

    def log_record_skipped(self, key: str, index: int, error_message: str) -> None:
        self.log(AuditEventBuilder.record_skipped(
            key=key,
            index=index,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step flow (e.g., first-run setup)
    and pass it through all subsequent operations.
    """
    return uuid4()
