"""
Aggregation Engine

DESIGN DECISION: Aggregation is pure and DETERMINISTIC.
Every function here works on a list of transactions that was already
loaded (and validated) by the storage layer. Nothing here touches storage,
reads the clock, or invents numbers: a month with no spending is zero.

Month matching is always on (year, month) of the transaction date against
the reference date.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from fintrack.models.reports import DashboardSummary, MonthlyAmount, MonthlyBreakdown
from fintrack.models.transaction import Transaction, TransactionType


DateLike = Union[date, datetime]

ZERO = Decimal("0")


def _month_key(value: DateLike) -> tuple[int, int]:
    return value.year, value.month


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move (year, month) by offset months; offset may be negative."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def month_transactions(
    transactions: Iterable[Transaction],
    reference_date: DateLike,
    type: Optional[TransactionType] = None,
) -> list[Transaction]:
    """Transactions in the reference month, optionally of one type, in input order."""
    key = _month_key(reference_date)
    return [
        t for t in transactions
        if _month_key(t.date) == key and (type is None or t.type == type)
    ]


def running_balance(
    transactions: Iterable[Transaction],
    starting_balance: Union[Decimal, int, str] = ZERO,
) -> Decimal:
    """Starting balance plus all income minus all expenses, over every transaction."""
    return Decimal(starting_balance) + sum((t.signed_amount for t in transactions), ZERO)


def current_month_spend(
    transactions: Iterable[Transaction],
    reference_date: DateLike,
) -> Decimal:
    """Sum of expenses in the reference month."""
    return _total(month_transactions(transactions, reference_date, TransactionType.EXPENSE))


def current_month_income(
    transactions: Iterable[Transaction],
    reference_date: DateLike,
) -> Decimal:
    """Sum of income in the reference month."""
    return _total(month_transactions(transactions, reference_date, TransactionType.INCOME))


def current_month_savings(
    transactions: Sequence[Transaction],
    reference_date: DateLike,
) -> Decimal:
    """Income minus spend for the reference month. Negative when overspent."""
    return (
        current_month_income(transactions, reference_date)
        - current_month_spend(transactions, reference_date)
    )


def trailing_series(
    transactions: Sequence[Transaction],
    reference_date: DateLike,
    months: int = 6,
) -> list[MonthlyAmount]:
    """
    Expense totals for the last `months` calendar months, oldest first.

    The series ends with the reference month. Months without expenses
    report zero.
    """
    if months < 0:
        raise ValueError(f"months must be non-negative, got {months}")

    totals: dict[tuple[int, int], Decimal] = {}
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            key = _month_key(t.date)
            totals[key] = totals.get(key, ZERO) + t.amount

    year, month = _month_key(reference_date)
    series = []
    for offset in range(months - 1, -1, -1):
        y, m = _shift_month(year, month, -offset)
        series.append(MonthlyAmount(
            label=date(y, m, 1).strftime("%b"),
            year=y,
            month=m,
            amount=totals.get((y, m), ZERO),
        ))
    return series


def spend_by_category(
    transactions: Iterable[Transaction],
    reference_date: DateLike,
) -> dict[str, Decimal]:
    """Expense totals per category for the reference month, in first-seen order."""
    result: dict[str, Decimal] = {}
    for t in month_transactions(transactions, reference_date, TransactionType.EXPENSE):
        result[t.category] = result.get(t.category, ZERO) + t.amount
    return result


def spend_by_day(
    transactions: Iterable[Transaction],
    reference_date: DateLike,
) -> dict[int, Decimal]:
    """Expense totals per day of the reference month, keyed by day, ascending."""
    result: dict[int, Decimal] = {}
    for t in month_transactions(transactions, reference_date, TransactionType.EXPENSE):
        result[t.date.day] = result.get(t.date.day, ZERO) + t.amount
    return dict(sorted(result.items()))


def recent_transactions(
    transactions: Sequence[Transaction],
    limit: int = 3,
) -> list[Transaction]:
    """The `limit` most recent transactions, newest first."""
    if limit <= 0:
        return []
    # Stable sort keeps storage order for equal dates
    return sorted(transactions, key=lambda t: t.date, reverse=True)[:limit]


def search_transactions(
    transactions: Iterable[Transaction],
    query: Optional[str],
) -> list[Transaction]:
    """Case-insensitive match on description or category. Empty query matches all."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(transactions)
    return [
        t for t in transactions
        if needle in t.description.lower() or needle in t.category.lower()
    ]


def build_dashboard(
    transactions: Sequence[Transaction],
    reference_date: DateLike,
    starting_balance: Union[Decimal, int, str] = ZERO,
    months: int = 6,
    recent_limit: int = 3,
) -> DashboardSummary:
    """Everything the dashboard needs, computed in one pass of calls."""
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()

    return DashboardSummary(
        reference_date=reference_date,
        balance=running_balance(transactions, starting_balance),
        monthly_spend=current_month_spend(transactions, reference_date),
        monthly_savings=current_month_savings(transactions, reference_date),
        spending_series=trailing_series(transactions, reference_date, months),
        recent_transactions=recent_transactions(transactions, recent_limit),
        transaction_count=len(transactions),
    )


def build_monthly_breakdown(
    transactions: Sequence[Transaction],
    reference_date: DateLike,
) -> MonthlyBreakdown:
    """Category, daily and list views of one month's spending."""
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()

    expenses = month_transactions(transactions, reference_date, TransactionType.EXPENSE)
    return MonthlyBreakdown(
        reference_date=reference_date,
        year=reference_date.year,
        month=reference_date.month,
        total_spend=_total(expenses),
        by_category=spend_by_category(expenses, reference_date),
        by_day=spend_by_day(expenses, reference_date),
        expenses=expenses,
    )
