"""
Input Validation

DESIGN DECISION: Form input is validated before it reaches storage.

SIGN-UP VALIDATION:
- Email format (user@domain.tld)
- Password minimum length
- Display name length

TRANSACTION VALIDATION:
- Amount present, numeric, non-negative
- Category and description present
- Category outside the suggested set (warning only)
- Date present and a calendar date
- Date far in the future (warning only)

The repositories remain the last line of defence: they still reject
duplicate emails, unknown users and invalid amounts on their own.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the view to show.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from fintrack.config import get_settings
from fintrack.models.transaction import TransactionType, suggested_categories
from fintrack.models.validation import ValidationIssue, ValidationResult
from fintrack.services.storage.interface import InvalidAmountError, parse_amount


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

MAX_NAME_LENGTH = 100
FUTURE_DATE_TOLERANCE_DAYS = 1


class SignUpValidator:
    """Checks sign-up details before a user is created."""

    def __init__(self, password_min_length: Optional[int] = None):
        if password_min_length is None:
            password_min_length = get_settings().security.password_min_length
        self._password_min_length = password_min_length

    def validate(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> ValidationResult:
        issues = []

        if not email or not email.strip():
            issues.append(ValidationIssue(
                field="email",
                issue_type="missing",
                message="Email is required",
                severity="error",
            ))
        elif not EMAIL_PATTERN.match(email.strip()):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Email must be in the form user@domain.com",
                severity="error",
            ))

        if len(password or "") < self._password_min_length:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {self._password_min_length} characters",
                severity="error",
                suggested_fix="Choose a longer password",
            ))

        if name and len(name.strip()) > MAX_NAME_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Name must be at most {MAX_NAME_LENGTH} characters",
                severity="error",
            ))

        return ValidationResult.from_issues(issues)


class TransactionValidator:
    """Checks the transaction form before a transaction is recorded."""

    def validate(
        self,
        type: Union[TransactionType, str],
        amount,
        category: str,
        description: str,
        date_value: Optional[Union[date, datetime]] = None,
        today: Optional[date] = None,
    ) -> ValidationResult:
        issues = []

        try:
            transaction_type = TransactionType(type)
        except ValueError:
            transaction_type = None
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="Type must be income or expense",
                severity="error",
            ))

        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        else:
            try:
                parse_amount(amount)
            except InvalidAmountError as e:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message=str(e),
                    severity="error",
                    suggested_fix="Enter a positive number such as 42.50",
                ))

        category = (category or "").strip()
        if not category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Please select a category",
                severity="error",
            ))
        elif transaction_type and category not in suggested_categories(transaction_type):
            issues.append(ValidationIssue(
                field="category",
                issue_type="unusual_value",
                message=f"'{category}' is not a usual {transaction_type.value} category",
                severity="warning",
            ))

        if not (description or "").strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
            ))

        if date_value is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))
        elif not isinstance(date_value, date):
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date must be a calendar date, got {date_value!r}",
                severity="error",
            ))
        else:
            day = date_value.date() if isinstance(date_value, datetime) else date_value
            today = today or date.today()
            if day > today + timedelta(days=FUTURE_DATE_TOLERANCE_DAYS):
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Date ({day}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        return ValidationResult.from_issues(issues)


def get_user_friendly_summary(result: ValidationResult) -> str:
    """
    Generate a short summary of validation results for the view.
    """
    if result.is_valid and not result.warnings:
        return "All checks passed."

    lines = []
    for issue in result.issues:
        if issue.severity == "error":
            lines.append(f"• {issue.message}")
            if issue.suggested_fix:
                lines.append(f"  {issue.suggested_fix}")

    if result.warnings:
        if lines:
            lines.append("")
        lines.append("Please verify:")
        for warning in result.warnings:
            lines.append(f"• {warning}")

    return "\n".join(lines)
