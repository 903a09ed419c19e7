"""Domain exceptions raised to UI-facing callers."""

from typing import Iterable, Optional

from homeledger.models.ledger import ValidationIssue


class HomeLedgerError(Exception):
    """Base exception for all domain errors."""
    pass


class ValidationError(HomeLedgerError, ValueError):
    """
    Input does not meet requirements.

    Carries the individual issues so a form can show each one next
    to its field.
    """

    def __init__(self, message: str, issues: Optional[Iterable[ValidationIssue]] = None):
        self.issues = list(issues or [])
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str, issue_type: str = "invalid_value") -> "ValidationError":
        return cls(message, [ValidationIssue(field=field, issue_type=issue_type, message=message)])


class DuplicateUsernameError(ValidationError):
    """A user with this exact username already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(
            f"Username already taken: {username}",
            [ValidationIssue(
                field="username",
                issue_type="duplicate",
                message="This username is already taken",
            )],
        )


class PermissionDeniedError(HomeLedgerError):
    """The acting session is not allowed to perform this action."""
    pass


class AlreadyInitializedError(HomeLedgerError):
    """First-run setup was requested on a store that is already set up."""
    pass


class SetupIncompleteError(HomeLedgerError):
    """First-run setup could not mark the store initialized."""
    pass
