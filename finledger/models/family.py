"""
Family Hub Models

A parallel ledger for a shared household: members hold balances,
chores (tasks) pay into those balances once approved, and members
contribute balance towards shared goals.

DESIGN DECISION: A task's lifecycle is an explicit status rather than
a pair of loose booleans. Approval is only possible from SUBMITTED and
APPROVED is terminal, so a chore can never be paid out twice.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from finledger.models.ledger import LedgerModel, coerce_calendar_date, new_id


class FamilyRole(str, Enum):
    """Role of a household member."""
    PARENT = "parent"
    CHILD = "child"


class TaskStatus(str, Enum):
    """
    Chore lifecycle.

    ASSIGNED -> SUBMITTED -> APPROVED
                          -> REJECTED -> SUBMITTED ...
    """
    ASSIGNED = "assigned"     # Waiting for the member to do it
    SUBMITTED = "submitted"   # Marked complete, awaiting a parent's decision
    APPROVED = "approved"     # Paid out (terminal)
    REJECTED = "rejected"     # Sent back, may be resubmitted


class FamilyMember(LedgerModel):
    """A household member with a spendable balance."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    role: FamilyRole = FamilyRole.CHILD
    balance: Decimal = Field(default=Decimal("0"), ge=0)
    avatar: Optional[str] = None


class FamilyTask(LedgerModel):
    """A chore assigned to one member, worth `value` when approved."""

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    assigned_to: str = Field(
        ...,
        description="ID of the member who earns the value"
    )
    value: Decimal = Field(default=Decimal("0"), ge=0)
    due_date: Optional[date] = None
    proof_required: bool = False
    proof_submitted: Optional[str] = None
    status: TaskStatus = TaskStatus.ASSIGNED

    @field_validator("due_date", mode="before")
    @classmethod
    def coerce_due_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @model_validator(mode="before")
    @classmethod
    def status_from_legacy_flags(cls, data: Any) -> Any:
        """Derive a status for records stored as completed/approved flags."""
        if not isinstance(data, dict) or "status" in data:
            return data
        approved = data.get("approved")
        completed = data.get("completed", False)
        if approved is True:
            status = TaskStatus.APPROVED
        elif approved is False and completed:
            status = TaskStatus.REJECTED
        elif completed:
            status = TaskStatus.SUBMITTED
        else:
            status = TaskStatus.ASSIGNED
        return {**data, "status": status}

    @property
    def completed(self) -> bool:
        return self.status != TaskStatus.ASSIGNED

    @property
    def approved(self) -> Optional[bool]:
        """True once paid, False if rejected, None while undecided."""
        if self.status == TaskStatus.APPROVED:
            return True
        if self.status == TaskStatus.REJECTED:
            return False
        return None


class FamilyGoal(LedgerModel):
    """A shared goal funded from member balances."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: Optional[date] = None
    contributions: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Total contributed per member ID"
    )

    @field_validator("deadline", mode="before")
    @classmethod
    def coerce_deadline(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @property
    def completed(self) -> bool:
        return self.current_amount >= self.target_amount
