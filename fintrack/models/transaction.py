"""
Transaction Models for fintrack

A transaction is a single income or expense event owned by exactly one user.
Transactions are created once and never updated or deleted.

DESIGN DECISION: Amounts are Decimal, never float.
Sums over many small amounts must come out exact on the dashboard.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


# Categories offered by the transaction form. Storage accepts any
# non-empty category; these are suggestions, not a closed set.
INCOME_CATEGORIES: tuple[str, ...] = (
    "salary",
    "freelance",
    "investments",
    "other",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "food",
    "transportation",
    "utilities",
    "entertainment",
    "shopping",
    "other",
)

SUGGESTED_CATEGORIES: dict[TransactionType, tuple[str, ...]] = {
    TransactionType.INCOME: INCOME_CATEGORIES,
    TransactionType.EXPENSE: EXPENSE_CATEGORIES,
}

CATEGORY_LABELS: dict[str, str] = {
    "salary": "Salary",
    "freelance": "Freelance",
    "investments": "Investments",
    "food": "Food & Dining",
    "transportation": "Transportation",
    "utilities": "Utilities",
    "entertainment": "Entertainment",
    "shopping": "Shopping",
    "other": "Other",
}


def suggested_categories(transaction_type: TransactionType) -> tuple[str, ...]:
    """Return the categories the form offers for a transaction type."""
    return SUGGESTED_CATEGORIES[TransactionType(transaction_type)]


def normalize_timestamp(value: datetime) -> datetime:
    """
    Bring a datetime into the form it is stored in.

    Aware datetimes are converted to UTC and made naive, so that every
    stored timestamp compares on the same clock.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TransactionCreate(BaseModel):
    """
    A transaction as submitted by the form, before storage assigns an id.

    Text fields are kept exactly as given; trimming is the form's job.
    """

    user_id: int = Field(
        ...,
        ge=1,
        description="Owner of the transaction"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Non-negative amount"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category (see SUGGESTED_CATEGORIES)"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened"
    )

    @field_validator('date', mode='before')
    @classmethod
    def accept_plain_date(cls, v):
        """A plain date means midnight of that day."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    @field_validator('date')
    @classmethod
    def store_as_naive_utc(cls, v: datetime) -> datetime:
        return normalize_timestamp(v)

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


class Transaction(TransactionCreate):
    """A stored transaction."""

    id: int = Field(
        ...,
        ge=1,
        description="Storage-assigned identifier"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it affects the balance: negative for expenses."""
        return -self.amount if self.is_expense else self.amount
