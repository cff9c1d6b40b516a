"""
Report Models

Shapes returned by the aggregation functions. These are computed on
demand from a ledger snapshot and never written to storage.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BudgetStatus(str, Enum):
    """How much of the income has been spent."""
    EXCELLENT = "excellent"                 # under 50%
    ON_TRACK = "on_track"                   # 50% and up
    APPROACHING_LIMIT = "approaching_limit"  # 80% and up
    OVER_BUDGET = "over_budget"             # 100%


class ExpenseSort(str, Enum):
    """Orderings offered by the expense list."""
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"


class DailyTotal(BaseModel):
    """Total spent on one day."""

    day: date
    amount: Decimal = Decimal("0")


class MonthlyTotal(BaseModel):
    """Total spent in one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    amount: Decimal = Decimal("0")


class SavingsPoint(BaseModel):
    """
    One day of the savings progress series.

    `savings` is the running balance: income spread evenly across the
    month, minus everything spent up to and including this day.
    """

    day: int = Field(ge=1, le=31)
    savings: Decimal
    expenses: Decimal = Decimal("0")
    goal_target: Optional[Decimal] = None
