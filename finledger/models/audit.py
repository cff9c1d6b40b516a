"""
Audit Models for Finledger

Every mutation of a ledger, the household hub or the user list is
described by an AuditEvent. Events are written to the structured log
and, when enabled, appended to the `audit-log` collection.

DESIGN DECISION: Audit logs are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from finledger.models.ledger import new_id, utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_SIGNED_UP = "user_signed_up"
    SIGNUP_REJECTED = "signup_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"
    USER_UPDATED = "user_updated"

    # Ledger records (expenses, incomes, goals, accounts, family records)
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"

    # Value movements
    GOAL_CONTRIBUTION = "goal_contribution"
    CONTRIBUTION_REJECTED = "contribution_rejected"
    TASK_SUBMITTED = "task_submitted"
    TASK_APPROVED = "task_approved"
    TASK_REJECTED = "task_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: str = Field(
        default_factory=new_id,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'family_task', 'user')"
    )
    entity_id: Optional[str] = None
    user_id: Optional[str] = Field(
        default=None,
        description="User whose ledger was touched, if any"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = True

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created("expense", expense.id, user_id)
        event = AuditEventBuilder.login_failed(email)
    """

    @staticmethod
    def record_created(
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            description=f"{entity_type} created",
            details=details or {},
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            description=f"{entity_type} updated",
            details=details or {},
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            description=f"{entity_type} deleted",
        )

    @staticmethod
    def user_signed_up(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"New user signed up: {email}",
        )

    @staticmethod
    def signup_rejected(email: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNUP_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description=f"Signup rejected for {email}",
            details={"reason": reason},
        )

    @staticmethod
    def login_succeeded(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="Login successful",
        )

    @staticmethod
    def login_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description=f"Login failed for {email}",
        )

    @staticmethod
    def goal_contribution(
        goal_id: str,
        amount: str,
        member_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CONTRIBUTION,
            entity_type="family_goal" if member_id else "goal",
            entity_id=goal_id,
            user_id=user_id,
            description=f"Contributed {amount} to goal",
            details={"amount": amount, "member_id": member_id},
        )

    @staticmethod
    def contribution_rejected(
        goal_id: str,
        member_id: str,
        amount: str,
        balance: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="family_goal",
            entity_id=goal_id,
            description="Contribution rejected: insufficient balance",
            details={"member_id": member_id, "amount": amount, "balance": balance},
        )

    @staticmethod
    def task_decided(
        task_id: str,
        approved: bool,
        member_id: str,
        value: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.TASK_APPROVED if approved
                else AuditEventType.TASK_REJECTED
            ),
            entity_type="family_task",
            entity_id=task_id,
            description=f"Task {'approved' if approved else 'rejected'}",
            details={"member_id": member_id, "value": value, "credited": approved},
        )
