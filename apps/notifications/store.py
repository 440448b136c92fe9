"""
Store access and change feed for notifications.

NotificationStore wraps the ORM queries used by the scanner and the feed.
ChangeFeed turns Notification post_save/post_delete signals, and the
notifications_marked_read signal of bulk reads, into insert/update/delete
events scoped to one owner.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from django.db import DatabaseError
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal
from django.utils import timezone

from apps.deadlines.store import StoreError

from .models import Notification

logger = logging.getLogger(__name__)

# Sent after a bulk read update, which skips post_save.
# Arguments: owner_id, ids
notifications_marked_read = Signal()


def day_window(day):
    """Return the aware [start, end) datetimes of a local calendar day."""
    start = timezone.make_aware(datetime.combine(day, time.min))
    return start, start + timedelta(days=1)


class NotificationStore:
    """ORM-backed notification store."""

    def list_for_owner(self, owner_id):
        """All notifications of the owner, newest first."""
        try:
            return list(
                Notification.objects.filter(owner_id=owner_id).order_by('-created_at', '-id')
            )
        except DatabaseError as e:
            logger.error(f'Failed to list notifications for owner {owner_id}: {e}')
            raise StoreError(str(e)) from e

    def find_for_day(self, owner_id, link, day):
        """
        Return a notification of the owner with this deep link created on
        the given local day, or None.
        """
        start, end = day_window(day)
        try:
            return Notification.objects.filter(
                owner_id=owner_id,
                link=link,
                created_at__gte=start,
                created_at__lt=end,
            ).first()
        except DatabaseError as e:
            raise StoreError(str(e)) from e

    def insert(self, owner_id, title, message, kind=Notification.Kind.INFO, link=''):
        try:
            return Notification.objects.create(
                owner_id=owner_id,
                title=title,
                message=message,
                kind=kind,
                link=link,
                read=False,
            )
        except DatabaseError as e:
            raise StoreError(str(e)) from e

    def update(self, owner_id, notification_id, read):
        """
        Toggle the read flag of one notification.

        Saved through the model so the change feed sees the update.
        Title and message are never edited after creation.
        """
        try:
            notification = Notification.objects.filter(
                pk=notification_id, owner_id=owner_id
            ).first()
            if notification is None:
                raise StoreError(f'Notification {notification_id} not found.')
            notification.read = read
            notification.save(update_fields=['read'])
        except DatabaseError as e:
            raise StoreError(str(e)) from e
        return notification

    def mark_all_read(self, owner_id):
        """Mark every unread notification of the owner as read."""
        return self._mark_read(owner_id, Notification.objects.filter(owner_id=owner_id, read=False))

    def mark_read(self, owner_id, ids):
        return self._mark_read(
            owner_id,
            Notification.objects.filter(owner_id=owner_id, pk__in=list(ids), read=False),
        )

    def _mark_read(self, owner_id, queryset):
        """
        Bulk read update. Sends notifications_marked_read with the ids
        that changed so subscribed feeds see one update per notification.
        """
        try:
            ids = list(queryset.values_list('pk', flat=True))
            updated = Notification.objects.filter(pk__in=ids).update(read=True) if ids else 0
        except DatabaseError as e:
            raise StoreError(str(e)) from e
        if ids:
            notifications_marked_read.send(sender=Notification, owner_id=owner_id, ids=ids)
        return updated

    def delete(self, owner_id, ids):
        """Delete the owner's notifications with the given ids."""
        try:
            deleted, _ = Notification.objects.filter(owner_id=owner_id, pk__in=list(ids)).delete()
        except DatabaseError as e:
            raise StoreError(str(e)) from e
        return deleted

    def latest_unread_urgent(self, owner_id):
        try:
            return Notification.objects.filter(
                owner_id=owner_id, read=False, kind=Notification.Kind.URGENT
            ).order_by('-created_at', '-id').first()
        except DatabaseError as e:
            raise StoreError(str(e)) from e


# =============================================================================
# Change feed
# =============================================================================

@dataclass(frozen=True)
class ChangeEvent:
    type: str  # insert | update | delete
    table: str
    owner_id: int
    record_id: int


class Subscription:
    """Handle returned by ChangeFeed.subscribe()."""

    def __init__(self, disconnect):
        self._disconnect = disconnect
        self.active = True

    def unsubscribe(self):
        if self.active:
            self._disconnect()
            self.active = False


class ChangeFeed:
    """
    In-process change feed for the notifications table.

    Events are delivered synchronously, and only for writes made on the
    thread that subscribed. Writes made by other threads or processes
    (other requests, the django-q worker) are picked up by the browser's
    periodic feed refresh instead.
    """

    table = 'notifications'
    _counter = itertools.count(1)

    def subscribe(self, owner_id, on_event):
        uid = f'notification-feed-{owner_id}-{next(self._counter)}'
        thread_id = threading.get_ident()

        def accepts(event_owner_id):
            return event_owner_id == owner_id and threading.get_ident() == thread_id

        def on_save(sender, instance, created, **kwargs):
            if not accepts(instance.owner_id):
                return
            on_event(ChangeEvent('insert' if created else 'update', self.table, owner_id, instance.pk))

        def on_delete(sender, instance, **kwargs):
            if not accepts(instance.owner_id):
                return
            on_event(ChangeEvent('delete', self.table, owner_id, instance.pk))

        def on_bulk_read(sender, ids, **kwargs):
            if not accepts(kwargs['owner_id']):
                return
            for record_id in ids:
                on_event(ChangeEvent('update', self.table, owner_id, record_id))

        post_save.connect(on_save, sender=Notification, weak=False, dispatch_uid=f'{uid}-save')
        post_delete.connect(on_delete, sender=Notification, weak=False, dispatch_uid=f'{uid}-delete')
        notifications_marked_read.connect(
            on_bulk_read, sender=Notification, weak=False, dispatch_uid=f'{uid}-read'
        )

        def disconnect():
            post_save.disconnect(sender=Notification, dispatch_uid=f'{uid}-save')
            post_delete.disconnect(sender=Notification, dispatch_uid=f'{uid}-delete')
            notifications_marked_read.disconnect(sender=Notification, dispatch_uid=f'{uid}-read')

        return Subscription(disconnect)
