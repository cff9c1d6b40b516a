"""Per-user notification inbox."""

from finledger.notifications.inbox import NotificationInbox

__all__ = ["NotificationInbox"]
