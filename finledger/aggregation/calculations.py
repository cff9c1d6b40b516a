"""
Ledger Aggregations

Pure functions over an in-memory snapshot of ledger records. They never
touch storage and never mutate their inputs, so the same snapshot always
gives the same answer.

Money totals are Decimal. Percentages are float.
"""

import calendar
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from finledger.models.ledger import Expense, Goal
from finledger.models.reports import (
    BudgetStatus,
    DailyTotal,
    ExpenseSort,
    MonthlyTotal,
    SavingsPoint,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, float, str]


def _money(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _in_month(day: date, year: int, month: int) -> bool:
    return day.year == year and day.month == month


# =============================================================================
# TOTALS
# =============================================================================

def total_amount(records: Iterable) -> Decimal:
    """Sum of `amount` over any records that carry one."""
    return sum((record.amount for record in records), ZERO)


def net_balance(income: Number, expenses: Number) -> Decimal:
    """What is left after spending. May be negative."""
    return _money(income) - _money(expenses)


def remaining_budget(income: Number, expenses: Number) -> Decimal:
    """What is left to spend, never below zero."""
    return max(net_balance(income, expenses), ZERO)


def category_totals(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> dict[str, Decimal]:
    """
    Sum of expense amounts per category.

    Pass year and month to restrict to one calendar month. Categories
    appear in the order they are first seen.
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        if year is not None and month is not None and not _in_month(expense.date, year, month):
            continue
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def expense_categories(expenses: Iterable[Expense]) -> list[str]:
    """Distinct categories, first-seen order."""
    return list(dict.fromkeys(expense.category for expense in expenses))


def category_share_of_income(
    expenses: Iterable[Expense],
    income: Number,
) -> dict[str, float]:
    """Each category's spending as a percentage of income. Empty when there is no income."""
    income = _money(income)
    if income <= 0:
        return {}
    return {
        category: float(amount / income * HUNDRED)
        for category, amount in category_totals(expenses).items()
    }


# =============================================================================
# RATES
# =============================================================================

def savings_rate(income: Number, total_expenses: Number) -> float:
    """
    Share of income not spent, in percent.

    (income - expenses) / income * 100, or 0 when there is no income.
    Negative when spending exceeds income.
    """
    income = _money(income)
    if income <= 0:
        return 0.0
    return float((income - _money(total_expenses)) / income * HUNDRED)


def budget_usage_percentage(income: Number, expenses: Number) -> float:
    """
    Share of income spent, in percent, capped at 100.

    0 when there is no income.
    """
    income = _money(income)
    if income <= 0:
        return 0.0
    return float(min(_money(expenses) / income * HUNDRED, HUNDRED))


def budget_status(percentage: float) -> BudgetStatus:
    if percentage >= 100:
        return BudgetStatus.OVER_BUDGET
    if percentage >= 80:
        return BudgetStatus.APPROACHING_LIMIT
    if percentage >= 50:
        return BudgetStatus.ON_TRACK
    return BudgetStatus.EXCELLENT


# =============================================================================
# ROLLUPS
# =============================================================================

def daily_totals(
    expenses: Iterable[Expense],
    days: int = 30,
    today: Optional[date] = None,
) -> list[DailyTotal]:
    """
    Per-day spending for the trailing window ending today.

    Every day in the window is present, oldest first, zero if nothing
    was spent.
    """
    if days < 1:
        raise ValueError("days must be at least 1")
    today = today or date.today()
    start = today - timedelta(days=days - 1)

    buckets = {start + timedelta(days=offset): ZERO for offset in range(days)}
    for expense in expenses:
        if expense.date in buckets:
            buckets[expense.date] += expense.amount
    return [DailyTotal(day=day, amount=amount) for day, amount in buckets.items()]


def month_daily_totals(
    expenses: Iterable[Expense],
    year: int,
    month: int,
) -> list[DailyTotal]:
    """Per-day spending for every day of one calendar month."""
    days_in_month = calendar.monthrange(year, month)[1]
    amounts = [ZERO] * days_in_month
    for expense in expenses:
        if _in_month(expense.date, year, month):
            amounts[expense.date.day - 1] += expense.amount
    return [
        DailyTotal(day=date(year, month, idx + 1), amount=amount)
        for idx, amount in enumerate(amounts)
    ]


def monthly_totals(expenses: Iterable[Expense], year: int) -> list[MonthlyTotal]:
    """Spending for each of the twelve months of a year."""
    amounts = [ZERO] * 12
    for expense in expenses:
        if expense.date.year == year:
            amounts[expense.date.month - 1] += expense.amount
    return [
        MonthlyTotal(year=year, month=idx + 1, amount=amount)
        for idx, amount in enumerate(amounts)
    ]


def savings_progress(
    expenses: Iterable[Expense],
    goals: Iterable[Goal],
    income: Number,
    year: int,
    month: int,
) -> list[SavingsPoint]:
    """
    Running savings balance for each day of a month.

    Monthly income accrues evenly across the days of the month and each
    expense is subtracted from its day onwards. The target of the first
    goal whose deadline falls in the month is attached to every point.
    """
    days_in_month = calendar.monthrange(year, month)[1]
    daily_income = _money(income) / days_in_month

    spent = [ZERO] * days_in_month
    for expense in expenses:
        if _in_month(expense.date, year, month):
            spent[expense.date.day - 1] += expense.amount

    goal_target = None
    for goal in goals:
        if goal.deadline is not None and _in_month(goal.deadline, year, month):
            goal_target = goal.target_amount
            break

    points = []
    cumulative_spent = ZERO
    for idx in range(days_in_month):
        cumulative_spent += spent[idx]
        points.append(SavingsPoint(
            day=idx + 1,
            savings=daily_income * (idx + 1) - cumulative_spent,
            expenses=spent[idx],
            goal_target=goal_target,
        ))
    return points


# =============================================================================
# GOALS
# =============================================================================

def goal_progress(goal: Goal) -> int:
    """Percent of the target reached, rounded half up."""
    ratio = goal.current_amount / goal.target_amount * HUNDRED
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def days_left(goal: Goal, today: Optional[date] = None) -> int:
    """Whole days until the deadline, zero once it has passed."""
    today = today or date.today()
    return max(0, (goal.deadline - today).days)


# =============================================================================
# EXPENSE LISTS
# =============================================================================

def recent_expenses(expenses: Sequence[Expense], limit: int = 5) -> list[Expense]:
    """The newest expenses by date."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)[:limit]


def filter_expenses(
    expenses: Iterable[Expense],
    search: str = "",
    category: Optional[str] = None,
    sort_by: Union[ExpenseSort, str] = ExpenseSort.DATE_DESC,
) -> list[Expense]:
    """
    Search, filter and sort an expense list.

    `search` matches note or category, case-insensitively. A category of
    None or "all" keeps every category.
    """
    needle = search.strip().lower()
    sort_by = ExpenseSort(sort_by)

    matched = [
        expense for expense in expenses
        if (not needle
            or needle in expense.note.lower()
            or needle in expense.category.lower())
        and (category in (None, "all") or expense.category == category)
    ]

    if sort_by == ExpenseSort.AMOUNT_ASC:
        return sorted(matched, key=lambda e: e.amount)
    if sort_by == ExpenseSort.AMOUNT_DESC:
        return sorted(matched, key=lambda e: e.amount, reverse=True)
    if sort_by == ExpenseSort.DATE_ASC:
        return sorted(matched, key=lambda e: e.date)
    return sorted(matched, key=lambda e: e.date, reverse=True)
