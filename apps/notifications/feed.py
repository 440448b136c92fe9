"""
Notification feed controller.

Keeps the owner's notification list in sync with the store. Every change
event triggers refresh(), a full resynchronization, so duplicated or
reordered events are harmless.

Newly arrived notifications (unread and absent from the previous fetch)
raise one toast each and, with browser permission, one local push alert
tagged with the notification id. The first fetch of a feed state never
alerts.
"""

import logging

from apps.deadlines.store import StoreError

from .alerts import BrowserAlerts
from .models import Notification
from .store import ChangeFeed, NotificationStore

logger = logging.getLogger(__name__)

LOAD_ERROR = 'Could not load notifications.'


class FeedState:
    """
    Remembered notification ids, kept in an injected mapping.

    The web layer passes request.session so the state spans the requests
    of one browsing session; tests pass a plain dict.
    """

    KEY = 'notification_feed_seen_ids'

    def __init__(self, storage=None):
        self.storage = {} if storage is None else storage

    @property
    def seen_ids(self):
        """Ids from the previous fetch, or None before the first fetch."""
        ids = self.storage.get(self.KEY)
        return None if ids is None else set(ids)

    def remember(self, ids):
        self.storage[self.KEY] = sorted(ids)


class NotificationFeed:
    """
    Client-side view of one owner's notifications.

    Usage:
        with NotificationFeed(user.pk, alerts=alerts, state=FeedState(session)) as feed:
            feed.mark_read(notification_id)
            feed.unread_count
    """

    def __init__(self, owner_id, store=None, alerts=None, changes=None, state=None):
        self.owner_id = owner_id
        self.store = store or NotificationStore()
        self.alerts = alerts or BrowserAlerts()
        self.changes = changes or ChangeFeed()
        self.state = state or FeedState()
        self.notifications = []
        self.new_arrivals = []
        self._subscription = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def mount(self):
        """Subscribe to the change feed and perform the initial fetch."""
        if self._subscription is None:
            self._subscription = self.changes.subscribe(self.owner_id, self.handle_event)
        self.refresh()
        return self

    def teardown(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc, tb):
        self.teardown()
        return False

    def handle_event(self, event):
        logger.debug(f'Notification change event: {event.type} #{event.record_id}')
        self.refresh()

    # =========================================================================
    # Sync
    # =========================================================================

    @property
    def unread_count(self):
        return sum(1 for n in self.notifications if not n.read)

    def refresh(self):
        """
        Re-fetch the owner's notifications and alert on new arrivals.

        On a store failure the last known list is kept and a toast is shown.
        """
        try:
            fetched = self.store.list_for_owner(self.owner_id)
        except StoreError as e:
            logger.error(f'Error fetching notifications for owner {self.owner_id}: {e}')
            self.alerts.error(LOAD_ERROR)
            return self.notifications

        previous = self.state.seen_ids
        if previous is not None:
            for notification in fetched:
                if not notification.read and notification.pk not in previous:
                    self._announce(notification)

        self.state.remember(n.pk for n in fetched)
        self.notifications = fetched
        return fetched

    def _announce(self, notification):
        level = 'warning' if notification.kind == Notification.Kind.URGENT else 'info'
        self.alerts.toast(level, notification.title, notification.message)
        if self.alerts.permission_state() == 'granted':
            self.alerts.show_local_alert(
                notification.title,
                body=notification.message,
                tag=str(notification.pk),
            )
        self.new_arrivals.append(notification)

    # =========================================================================
    # User actions
    # =========================================================================

    def mark_read(self, notification_id):
        try:
            self.store.update(self.owner_id, notification_id, read=True)
        except StoreError as e:
            logger.error(f'Error marking notification {notification_id} read: {e}')
            self.alerts.error('Could not mark the notification as read.')
            return False
        self.refresh()
        return True

    def mark_all_read(self):
        try:
            self.store.mark_all_read(self.owner_id)
        except StoreError as e:
            logger.error(f'Error marking all notifications read: {e}')
            self.alerts.error('Could not mark all notifications as read.')
            return False
        self.refresh()
        return True

    def mark_selected_read(self, ids):
        ids = list(ids)
        try:
            self.store.mark_read(self.owner_id, ids)
        except StoreError as e:
            logger.error(f'Error marking notifications read: {e}')
            self.alerts.error('Could not mark the notifications as read.')
            return False
        self.refresh()
        return True

    def delete(self, ids):
        ids = list(ids)
        try:
            self.store.delete(self.owner_id, ids)
        except StoreError as e:
            logger.error(f'Error deleting notifications {ids}: {e}')
            self.alerts.error('Could not delete the notification.')
            return False
        self.refresh()
        return True

    def open(self, notification):
        """
        Click-through: mark read if unread and return the deep link (or None).
        """
        if not notification.read:
            self.mark_read(notification.pk)
        return notification.link or None
