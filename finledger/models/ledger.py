"""
Core Ledger Models for Finledger

These models define the schemas for every record kept in a user's
ledger: expenses, income entries, savings goals and linked accounts.

DESIGN DECISION: Stored payloads come from a schemaless key-value store
that may hold records written by older camelCase clients. Every model
accepts both snake_case field names and their camelCase aliases on
input, and always dumps snake_case.

Derived values (goal completion, progress) are properties. They are
never serialized, so a stored record cannot disagree with its amounts.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

# Fields named "date" would shadow the type inside a class body
CalendarDate = date


def new_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def coerce_calendar_date(value: Any) -> Any:
    """
    Reduce datetimes and ISO timestamp strings to a calendar date.

    Older clients stored full timestamps ("2024-05-01T10:00:00.000Z")
    where only the day matters.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class LedgerModel(BaseModel):
    """Base for all persisted records."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# ENUMS
# =============================================================================

class AccountType(str, Enum):
    """Kinds of account a user can link."""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"


# =============================================================================
# PERSONAL LEDGER RECORDS
# =============================================================================

class Expense(LedgerModel):
    """
    A single expense.

    Created on user submission, mutated only by full replacement and
    deleted by id.
    """

    id: str = Field(
        default_factory=new_id,
        description="Unique expense ID"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label"
    )
    date: CalendarDate = Field(
        ...,
        description="Day the expense happened"
    )
    note: str = Field(
        default="",
        max_length=1000,
    )
    user_id: str = Field(
        default="",
        description="Owning user"
    )
    receipt_image: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @field_validator("note", mode="before")
    @classmethod
    def none_note_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Income(LedgerModel):
    """An income entry (salary, freelance payment, gift...)."""

    id: str = Field(default_factory=new_id)
    amount: Decimal = Field(..., ge=0)
    source: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Where the money came from"
    )
    description: str = ""
    date: CalendarDate
    user_id: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)


class Goal(LedgerModel):
    """
    A personal savings goal.

    `completed` is derived from the amounts and is not stored.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount to reach"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount saved so far"
    )
    deadline: date
    category: str = "Savings"
    user_id: str = ""

    @field_validator("deadline", mode="before")
    @classmethod
    def coerce_deadline(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @property
    def completed(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def remaining_amount(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal("0"))


class Account(LedgerModel):
    """A linked (mock) bank account."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    type: AccountType = AccountType.CHECKING
    balance: Decimal = Decimal("0")
    institution: Optional[str] = None
    last_updated: datetime = Field(default_factory=utc_now)
    user_id: str = ""
