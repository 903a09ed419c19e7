"""
Tests for form input validation.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from homeledger.exceptions import ValidationError
from homeledger.models import UserRole, ValidationIssue
from homeledger.validation import InputValidator, ensure_valid

FIXED_TODAY = date(2024, 3, 15)


def fields_of(issues) -> list[str]:
    return [issue.field for issue in issues]


class TestExpenseValidation:

    def test_valid_expense(self, validator):
        assert validator.validate_expense("Lunch", "25000", "cat-1", FIXED_TODAY) == []

    def test_reports_every_missing_field(self, validator):
        """Test that all problems are returned together."""
        issues = validator.validate_expense("  ", None, "", None)
        assert fields_of(issues) == ["title", "amount", "category_id", "date"]
        assert all(issue.issue_type == "missing" for issue in issues)

    @pytest.mark.parametrize("amount", ["0", "-10", "abc", "NaN", "inf", Decimal("-0.01")])
    def test_amount_must_be_positive_number(self, validator, amount):
        issues = validator.validate_expense("Lunch", amount, "cat-1", FIXED_TODAY)
        assert [(i.field, i.issue_type) for i in issues] == [("amount", "invalid_value")]

    def test_future_date_rejected(self, validator):
        """Test that expenses cannot be dated after today."""
        issues = validator.validate_expense("Lunch", 1, "cat-1", FIXED_TODAY + timedelta(days=1))
        assert [i.issue_type for i in issues] == ["future_date"]

    def test_past_date_accepted(self, validator):
        assert validator.validate_expense("Lunch", 1, "cat-1", date(2020, 1, 1)) == []

    def test_date_must_be_a_date(self, validator):
        issues = validator.validate_expense("Lunch", 1, "cat-1", "2024-01-01")
        assert [i.issue_type for i in issues] == ["invalid_value"]

    def test_length_limits(self, validator):
        """Test that text longer than the stored fields allow is reported."""
        issues = validator.validate_expense("x" * 201, 1, "cat-1", FIXED_TODAY, notes="n" * 1001)
        assert [(i.field, i.issue_type) for i in issues] == [("title", "too_long"), ("notes", "too_long")]
        assert validator.validate_expense("x" * 200, 1, "cat-1", FIXED_TODAY, notes="n" * 1000) == []


class TestUserValidation:

    def test_valid_user(self, validator):
        assert validator.validate_new_user("Ann", "ann", "secret1", UserRole.USER) == []

    def test_required_fields(self, validator):
        issues = validator.validate_new_user("", " ", "", "user")
        assert fields_of(issues) == ["name", "username", "password"]

    def test_password_minimum_length(self, validator):
        issues = validator.validate_new_user("Ann", "ann", "12345")
        assert [i.issue_type for i in issues] == ["too_short"]

    def test_configurable_minimum_length(self):
        strict = InputValidator(min_password_length=10)
        assert strict.validate_new_user("Ann", "ann", "secret1") != []

    def test_name_and_username_length(self, validator):
        issues = validator.validate_new_user("N" * 101, "u" * 51, "secret1")
        assert [(i.field, i.issue_type) for i in issues] == [("name", "too_long"), ("username", "too_long")]
        assert validator.validate_new_user("N" * 100, "u" * 50, "secret1") == []

    def test_unknown_role(self, validator):
        issues = validator.validate_new_user("Ann", "ann", "secret1", "owner")
        assert fields_of(issues) == ["role"]

    def test_setup_requires_matching_confirmation(self, validator):
        issues = validator.validate_setup("Admin", "admin", "secret1", "secret2")
        assert [(i.field, i.issue_type) for i in issues] == [("confirm_password", "mismatch")]
        assert validator.validate_setup("Admin", "admin", "secret1", "secret1") == []


class TestCategoryValidation:

    def test_name_required(self, validator):
        assert fields_of(validator.validate_category("   ")) == ["name"]

    def test_name_length(self, validator):
        assert fields_of(validator.validate_category("C" * 51)) == ["name"]
        assert validator.validate_category("  " + "C" * 50 + "  ") == []

    @pytest.mark.parametrize("color", ["#FF6384", "#abc"])
    def test_hex_colors_accepted(self, validator, color):
        assert validator.validate_category("Food", color) == []

    @pytest.mark.parametrize("color", ["red", "FF6384", "#GGGGGG", ""])
    def test_bad_colors_rejected(self, validator, color):
        assert fields_of(validator.validate_category("Food", color)) == ["color"]


class TestEnsureValid:

    def test_no_issues_passes(self):
        ensure_valid([])

    def test_warnings_pass(self):
        ensure_valid([ValidationIssue(field="notes", issue_type="long", message="Long", severity="warning")])

    def test_errors_raise_with_issues(self):
        issues = [ValidationIssue(field="title", issue_type="missing", message="Title is required")]
        with pytest.raises(ValidationError) as excinfo:
            ensure_valid(issues, "Cannot save expense")
        assert str(excinfo.value) == "Cannot save expense: Title is required"
        assert excinfo.value.issues == issues
