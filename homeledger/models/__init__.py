"""
Data Models Package

All records persisted by HomeLedger, plus the input, patch, report and
audit models that travel between the core and the UI.
"""

from homeledger.models.ledger import (
    Category,
    CategoryPatch,
    Expense,
    ExpensePatch,
    LedgerModel,
    NewCategory,
    NewExpense,
    NewUser,
    PatchModel,
    PublicUser,
    User,
    UserPatch,
    UserRole,
    ValidationIssue,
    new_id,
    utc_now,
)
from homeledger.models.auth import (
    AppState,
    InitState,
    LoginOutcome,
    LoginResult,
    Session,
    SetupRequest,
)
from homeledger.models.reports import (
    CategoryTotal,
    DashboardSummary,
    PeriodReport,
    ReportPeriod,
    TrendPoint,
)
from homeledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger records
    "Category",
    "CategoryPatch",
    "Expense",
    "ExpensePatch",
    "LedgerModel",
    "NewCategory",
    "NewExpense",
    "NewUser",
    "PatchModel",
    "PublicUser",
    "User",
    "UserPatch",
    "UserRole",
    "ValidationIssue",
    "new_id",
    "utc_now",
    # Auth
    "AppState",
    "InitState",
    "LoginOutcome",
    "LoginResult",
    "Session",
    "SetupRequest",
    # Reports
    "CategoryTotal",
    "DashboardSummary",
    "PeriodReport",
    "ReportPeriod",
    "TrendPoint",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
