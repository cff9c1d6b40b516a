"""
Data Models Package

This package contains all Pydantic models used in Finledger.
Everything read from or written to storage conforms to these schemas.
"""

from finledger.models.ledger import (
    Account,
    AccountType,
    Expense,
    Goal,
    Income,
    LedgerModel,
    new_id,
    utc_now,
)
from finledger.models.family import (
    FamilyGoal,
    FamilyMember,
    FamilyRole,
    FamilyTask,
    TaskStatus,
)
from finledger.models.user import (
    AuthResult,
    SignupRequest,
    User,
)
from finledger.models.reports import (
    BudgetStatus,
    DailyTotal,
    ExpenseSort,
    MonthlyTotal,
    SavingsPoint,
)
from finledger.models.notification import (
    Notification,
    NotificationType,
)
from finledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Account",
    "AccountType",
    "Expense",
    "Goal",
    "Income",
    "LedgerModel",
    "new_id",
    "utc_now",
    # Family models
    "FamilyGoal",
    "FamilyMember",
    "FamilyRole",
    "FamilyTask",
    "TaskStatus",
    # User models
    "AuthResult",
    "SignupRequest",
    "User",
    # Report models
    "BudgetStatus",
    "DailyTotal",
    "ExpenseSort",
    "MonthlyTotal",
    "SavingsPoint",
    # Notification models
    "Notification",
    "NotificationType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
