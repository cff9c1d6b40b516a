"""
Tests for the notification inbox.
"""

import json

import pytest

from finledger.models import Notification, NotificationType
from finledger.notifications import NotificationInbox


@pytest.fixture
def inbox(store, audit_logger) -> NotificationInbox:
    return NotificationInbox(store, "user-1", audit_logger)


class TestNotificationModel:
    """Tests for the stored notification shape."""

    def test_defaults(self):
        """Test a new notification is unread info."""
        notification = Notification(title="Hi", message="Welcome")
        assert notification.type == NotificationType.INFO
        assert notification.read is False

    def test_legacy_date_field(self):
        """Test that the creation time is read from an older `date` key."""
        notification = Notification.model_validate({
            "id": "n1",
            "title": "Budget Alert",
            "message": "Food is at 90%",
            "type": "warning",
            "read": False,
            "date": "2024-03-01T09:30:00.000Z",
            "actionUrl": "/expenses",
        })
        assert notification.created_at.year == 2024
        assert notification.action_url == "/expenses"

    def test_empty_title_rejected(self):
        """Test that a blank title does not validate."""
        with pytest.raises(ValueError):
            Notification(title="   ", message="x")


class TestNotificationInbox:
    """Tests for adding, reading and dismissing notifications."""

    def test_requires_user_id(self, store):
        """Test that an inbox needs an owner."""
        with pytest.raises(ValueError):
            NotificationInbox(store, "")

    def test_add_is_unread_and_scoped(self, inbox, storage):
        """Test that a new notification is stored unread under the user's key."""
        added = inbox.add("Saving Tip", "Shop with a list", NotificationType.INFO)
        assert added.read is False
        assert added.user_id == "user-1"
        stored = json.loads(storage.get_item("user-notifications_user-1"))
        assert [n["id"] for n in stored] == [added.id]

    def test_similar_notification_is_suppressed(self, inbox, storage):
        """Test that the same title and message is only stored once."""
        first = inbox.add("Income Not Set", "Set your income")
        before = storage.get_item("user-notifications_user-1")

        second = inbox.add("Income Not Set", "Set your income", NotificationType.WARNING)

        assert second.id == first.id
        assert storage.get_item("user-notifications_user-1") == before

    def test_same_title_new_message_is_kept(self, inbox):
        """Test that only an exact title and message match is suppressed."""
        inbox.add("Goal Progress", "25% of Bike")
        inbox.add("Goal Progress", "50% of Bike")
        assert inbox.unread_count == 2

    def test_newest_first(self, inbox):
        """Test listing order."""
        older = inbox.add("A", "first")
        newer = inbox.add("B", "second")
        assert [n.id for n in inbox.list_notifications()] == [newer.id, older.id]

    def test_mark_as_read(self, inbox):
        """Test marking one notification read."""
        first = inbox.add("A", "first")
        inbox.add("B", "second")

        assert inbox.mark_as_read(first.id) is True
        assert inbox.get(first.id).read is True
        assert inbox.unread_count == 1
        assert [n.title for n in inbox.list_notifications(unread_only=True)] == ["B"]

    def test_mark_unknown_as_read(self, inbox):
        """Test that an unknown id reports False."""
        assert inbox.mark_as_read("ghost") is False

    def test_mark_all_as_read(self, inbox):
        """Test marking everything read returns the number changed."""
        first = inbox.add("A", "first")
        inbox.add("B", "second")
        inbox.mark_as_read(first.id)

        assert inbox.mark_all_as_read() == 1
        assert inbox.unread_count == 0
        assert inbox.mark_all_as_read() == 0

    def test_delete_notification(self, inbox):
        """Test deleting one notification."""
        added = inbox.add("A", "first")
        assert inbox.delete_notification(added.id) is True
        assert inbox.delete_notification(added.id) is False
        assert inbox.list_notifications() == []

    def test_clear_notifications(self, inbox, storage):
        """Test clearing empties the slot, unreadable entries included."""
        storage.set_item("user-notifications_user-1", json.dumps([
            {"id": "broken", "title": "", "message": ""},
        ]))
        inbox.add("A", "first")

        inbox.clear_notifications()

        assert inbox.list_notifications() == []
        assert json.loads(storage.get_item("user-notifications_user-1")) == []

    def test_inboxes_are_isolated(self, store, inbox):
        """Test that one user's notifications are invisible to another."""
        inbox.add("A", "first")
        assert NotificationInbox(store, "user-2").unread_count == 0
