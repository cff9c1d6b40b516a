"""
Notification Inbox

A user's notifications, kept under `user-notifications_<userId>`.

Adding a notification whose title and message match one already in the
inbox returns the existing entry and writes nothing, so a condition
checked on every page load announces itself once.
"""

from typing import Optional

import structlog

from finledger.audit import AuditLogger
from finledger.ledger.repository import CollectionRepository
from finledger.models.notification import Notification, NotificationType
from finledger.services.storage import NOTIFICATIONS, LedgerStore, scoped_key


logger = structlog.get_logger(__name__)


class NotificationInbox:
    """Add, read and dismiss one user's notifications."""

    def __init__(
        self,
        store: LedgerStore,
        user_id: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if not user_id:
            raise ValueError("A notification inbox needs a user id")
        self._store = store
        self._user_id = user_id
        self._notifications = CollectionRepository(
            store, scoped_key(NOTIFICATIONS, user_id), Notification, "notification",
            audit_logger, user_id,
        )

    @property
    def user_id(self) -> str:
        return self._user_id

    def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        """Notifications newest first."""
        notifications = list(reversed(self._notifications.list_records()))
        if unread_only:
            notifications = [n for n in notifications if not n.read]
        return notifications

    def get(self, notification_id: str) -> Optional[Notification]:
        return self._notifications.get(notification_id)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications.list_records() if not n.read)

    def add(
        self,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        action_url: Optional[str] = None,
        action_text: Optional[str] = None,
    ) -> Notification:
        """
        Post a notification, unread.

        Raises:
            ValueError: If title or message is empty
        """
        notification = Notification(
            title=title,
            message=message,
            type=type,
            action_url=action_url,
            action_text=action_text,
            user_id=self._user_id,
        )
        for existing in self._notifications.list_records():
            if existing.is_similar_to(notification):
                logger.debug("notification_suppressed", existing_id=existing.id)
                return existing
        return self._notifications.add(notification)

    def mark_as_read(self, notification_id: str) -> bool:
        """Returns False for an unknown id. Already-read entries are not rewritten."""
        notification = self._notifications.get(notification_id)
        if notification is None:
            return False
        if not notification.read:
            self._notifications.replace(notification.model_copy(update={"read": True}))
        return True

    def mark_all_as_read(self) -> int:
        """Mark every notification read. Returns how many changed."""
        records = self._notifications.list_records()
        unread = sum(1 for n in records if not n.read)
        if unread:
            self._notifications.save_all([
                n.model_copy(update={"read": True}) for n in records
            ])
        return unread

    def delete_notification(self, notification_id: str) -> bool:
        return self._notifications.remove(notification_id)

    def clear_notifications(self) -> None:
        """Empty the inbox, including entries that no longer validate."""
        self._store.set(self._notifications.key, [])
        logger.info("notifications_cleared", user_id=self._user_id)
