"""Pure aggregation functions over ledger snapshots."""

from finledger.aggregation.calculations import (
    budget_status,
    budget_usage_percentage,
    category_share_of_income,
    category_totals,
    daily_totals,
    days_left,
    expense_categories,
    filter_expenses,
    goal_progress,
    month_daily_totals,
    monthly_totals,
    net_balance,
    recent_expenses,
    remaining_budget,
    savings_progress,
    savings_rate,
    total_amount,
)

__all__ = [
    "budget_status",
    "budget_usage_percentage",
    "category_share_of_income",
    "category_totals",
    "daily_totals",
    "days_left",
    "expense_categories",
    "filter_expenses",
    "goal_progress",
    "month_daily_totals",
    "monthly_totals",
    "net_balance",
    "recent_expenses",
    "remaining_budget",
    "savings_progress",
    "savings_rate",
    "total_amount",
]
