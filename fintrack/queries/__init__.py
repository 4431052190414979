"""Transaction aggregation package."""

from fintrack.queries.aggregations import (
    build_dashboard,
    build_monthly_breakdown,
    current_month_income,
    current_month_savings,
    current_month_spend,
    month_transactions,
    recent_transactions,
    running_balance,
    search_transactions,
    spend_by_category,
    spend_by_day,
    trailing_series,
)

__all__ = [
    "build_dashboard",
    "build_monthly_breakdown",
    "current_month_income",
    "current_month_savings",
    "current_month_spend",
    "month_transactions",
    "recent_transactions",
    "running_balance",
    "search_transactions",
    "spend_by_category",
    "spend_by_day",
    "trailing_series",
]
