"""Input validation package."""

from fintrack.validation.validator import (
    SignUpValidator,
    TransactionValidator,
    get_user_friendly_summary,
)

__all__ = ["SignUpValidator", "TransactionValidator", "get_user_friendly_summary"]
