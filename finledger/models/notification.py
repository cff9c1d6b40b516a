"""
Notification Models

One entry of a user's notification inbox. Older clients stored the
creation time under `date`; it is read as created_at.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, Field

from finledger.models.ledger import LedgerModel, new_id, utc_now


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(LedgerModel):
    """A message shown in the inbox until deleted or cleared."""

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    type: NotificationType = NotificationType.INFO
    read: bool = False
    created_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("created_at", "createdAt", "date"),
    )
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    user_id: str = ""

    def is_similar_to(self, other: "Notification") -> bool:
        """Same title and message, whatever the type or read state."""
        return self.title == other.title and self.message == other.message
