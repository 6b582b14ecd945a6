"""In-app notifications sent when an admin changes an account's state."""

from pintukerja.notifications.notifier import ModerationNotifier
from pintukerja.notifications.store import Notification, NotificationStore

__all__ = ["ModerationNotifier", "Notification", "NotificationStore"]
