"""
Report Models

Read-only results of the aggregation engine, shaped for the two views:
the dashboard and the monthly spending breakdown.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from fintrack.models.transaction import Transaction


class MonthlyAmount(BaseModel):
    """One point of a month-by-month series."""

    label: str = Field(
        ...,
        description="Short month name, e.g. 'Mar'"
    )
    year: int
    month: int = Field(ge=1, le=12)
    amount: Decimal = Field(
        ...,
        description="Sum for the month; zero when nothing was recorded"
    )


class DashboardSummary(BaseModel):
    """Everything the dashboard shows for one user and reference date."""

    reference_date: date
    balance: Decimal = Field(
        ...,
        description="Starting balance plus all income minus all expenses"
    )
    monthly_spend: Decimal
    monthly_savings: Decimal
    spending_series: list[MonthlyAmount] = Field(
        default_factory=list,
        description="Expense totals, oldest month first"
    )
    recent_transactions: list[Transaction] = Field(default_factory=list)
    transaction_count: int = Field(default=0, ge=0)


class MonthlyBreakdown(BaseModel):
    """Spending for a single calendar month."""

    reference_date: date
    year: int
    month: int = Field(ge=1, le=12)
    total_spend: Decimal
    by_category: dict[str, Decimal] = Field(default_factory=dict)
    by_day: dict[int, Decimal] = Field(default_factory=dict)
    expenses: list[Transaction] = Field(
        default_factory=list,
        description="The month's expenses, in list order"
    )

    @property
    def has_spending(self) -> bool:
        return bool(self.expenses)

    @property
    def month_label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")
