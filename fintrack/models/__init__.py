"""
Data Models Package

This package contains all Pydantic models used in fintrack.
All data flowing between storage, aggregation and the views conforms to these schemas.
"""

from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from fintrack.models.reports import (
    DashboardSummary,
    MonthlyAmount,
    MonthlyBreakdown,
)
from fintrack.models.transaction import (
    CATEGORY_LABELS,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    SUGGESTED_CATEGORIES,
    Transaction,
    TransactionCreate,
    TransactionType,
    suggested_categories,
)
from fintrack.models.user import User
from fintrack.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Transaction models
    "CATEGORY_LABELS",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "SUGGESTED_CATEGORIES",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "suggested_categories",
    # User models
    "User",
    # Report models
    "DashboardSummary",
    "MonthlyAmount",
    "MonthlyBreakdown",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
