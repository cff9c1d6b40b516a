"""Family hub package."""

from finledger.family.hub import (
    FamilyError,
    FamilyHub,
    InsufficientBalanceError,
    TaskStateError,
)

__all__ = [
    "FamilyError",
    "FamilyHub",
    "InsufficientBalanceError",
    "TaskStateError",
]
