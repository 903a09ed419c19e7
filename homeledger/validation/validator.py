"""
Form Input Validation

DESIGN DECISION: Validation reports, it does not fix. Each check returns
a list of ValidationIssue so the form can show every problem at once;
ensure_valid() turns error-level issues into a ValidationError for code
paths that must not continue.

These are the checks the screens run before calling the core:
- Expenses: title, positive amount, category, no future dates
- Users: required fields, minimum password length, known role
- Text fields: the same maximum lengths the models declare, so input
  that passes here never fails later inside a model
- First-run setup: as users, plus matching password confirmation
- Categories: name, hex color

The storage layer does NOT repeat the date rule; an expense dated in
the future can still be stored if a caller skips validation.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional

from homeledger.exceptions import ValidationError
from homeledger.models.ledger import HEX_COLOR_PATTERN, UserRole, ValidationIssue


_HEX_COLOR = re.compile(HEX_COLOR_PATTERN)

MAX_NAME_LENGTH = 100
MAX_USERNAME_LENGTH = 50
MAX_TITLE_LENGTH = 200
MAX_CATEGORY_NAME_LENGTH = 50
MAX_NOTES_LENGTH = 1000


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _missing(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type="missing", message=message)


def _check_length(issues: list, field: str, value: Any, limit: int, label: str) -> None:
    if isinstance(value, str) and len(value.strip()) > limit:
        issues.append(ValidationIssue(
            field=field,
            issue_type="too_long",
            message=f"{label} must be at most {limit} characters",
        ))


def ensure_valid(issues: Iterable[ValidationIssue], message: str = "Invalid input") -> None:
    """Raise ValidationError if any issue is an error."""
    issues = list(issues)
    errors = [issue for issue in issues if issue.severity == "error"]
    if errors:
        raise ValidationError(f"{message}: {errors[0].message}", issues)


class InputValidator:
    """
    Validates raw form input.

    Args:
        min_password_length: Shortest accepted password
        today: Callable returning the current date (injectable for tests)
    """

    def __init__(
        self,
        min_password_length: int = 6,
        today: Optional[Callable[[], date]] = None,
    ):
        self._min_password_length = min_password_length
        self._today = today or date.today

    def validate_expense(
        self,
        title: Any,
        amount: Any,
        category_id: Any,
        expense_date: Any,
        notes: Any = None,
    ) -> list[ValidationIssue]:
        issues = []

        if _is_blank(title):
            issues.append(_missing("title", "Title is required"))
        else:
            _check_length(issues, "title", title, MAX_TITLE_LENGTH, "Title")

        if _is_blank(amount):
            issues.append(_missing("amount", "Amount is required"))
        else:
            try:
                parsed = Decimal(str(amount))
            except (InvalidOperation, ValueError):
                parsed = None
            if parsed is None or not parsed.is_finite() or parsed <= 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be a positive number",
                ))

        if _is_blank(category_id):
            issues.append(_missing("category_id", "Category is required"))

        if expense_date is None:
            issues.append(_missing("date", "Date is required"))
        elif not isinstance(expense_date, date):
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_value",
                message="Date must be a calendar date",
            ))
        else:
            day = expense_date.date() if hasattr(expense_date, "date") else expense_date
            if day > self._today():
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date cannot be in the future",
                ))

        _check_length(issues, "notes", notes, MAX_NOTES_LENGTH, "Notes")
        return issues

    def validate_new_user(
        self,
        name: Any,
        username: Any,
        password: Any,
        role: Any = UserRole.USER,
    ) -> list[ValidationIssue]:
        issues = []

        if _is_blank(name):
            issues.append(_missing("name", "Name is required"))
        else:
            _check_length(issues, "name", name, MAX_NAME_LENGTH, "Name")
        if _is_blank(username):
            issues.append(_missing("username", "Username is required"))
        else:
            _check_length(issues, "username", username, MAX_USERNAME_LENGTH, "Username")

        if _is_blank(password):
            issues.append(_missing("password", "Password is required"))
        elif not isinstance(password, str) or len(password) < self._min_password_length:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {self._min_password_length} characters",
            ))

        try:
            UserRole(role)
        except ValueError:
            issues.append(ValidationIssue(
                field="role",
                issue_type="invalid_value",
                message="Role must be 'admin' or 'user'",
            ))

        return issues

    def validate_setup(
        self,
        name: Any,
        username: Any,
        password: Any,
        confirm_password: Any,
    ) -> list[ValidationIssue]:
        issues = self.validate_new_user(name, username, password, UserRole.ADMIN)
        if not _is_blank(password) and password != confirm_password:
            issues.append(ValidationIssue(
                field="confirm_password",
                issue_type="mismatch",
                message="Passwords do not match",
            ))
        return issues

    def validate_category(self, name: Any, color: Any = None) -> list[ValidationIssue]:
        issues = []
        if _is_blank(name):
            issues.append(_missing("name", "Category name cannot be empty"))
        else:
            _check_length(issues, "name", name, MAX_CATEGORY_NAME_LENGTH, "Category name")
        if color is not None and not (isinstance(color, str) and _HEX_COLOR.fullmatch(color)):
            issues.append(ValidationIssue(
                field="color",
                issue_type="invalid_format",
                message="Color must be a hex value like #FF6384",
            ))
        return issues
