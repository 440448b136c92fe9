"""
Service layer for notifications app.

Deadline scanner: turns upcoming deadlines into notification records.

- Lead-time thresholds: due today, tomorrow and in 3 days
- Dedup: skip a deadline already notified today (owner, deep link, day)
- Partial-failure tolerant: one failed insert never aborts the scan

Entry points: the django-q job in tasks.py, the check-deadlines endpoint,
the check_deadline_notifications management command and the client
bootstrap (see gate.py).
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from django.utils import timezone

from apps.deadlines.store import DeadlineStore, StoreError

from .models import Notification
from .store import NotificationStore

logger = logging.getLogger(__name__)

# Day offsets at which a deadline gets a notification
LEAD_TIME_OFFSETS = (0, 1, 3)

# offset -> (kind, title, phrase used in the message)
ALERT_LEVELS = {
    0: (Notification.Kind.URGENT, 'Deadline due TODAY!', 'is due today!'),
    1: (Notification.Kind.WARNING, 'Deadline due tomorrow', 'is due tomorrow.'),
    3: (Notification.Kind.INFO, 'Deadline due in 3 days', 'is due in 3 days.'),
}


class ScanError(Exception):
    """The candidate deadlines could not be fetched; the scan did not run."""


@dataclass
class ScanResult:
    checked: int = 0
    notifications_created: List[int] = field(default_factory=list)

    @property
    def message(self):
        return (
            f'Checked {self.checked} deadlines, '
            f'created {len(self.notifications_created)} notifications'
        )

    def as_dict(self):
        return {
            'success': True,
            'message': self.message,
            'notifications_created': list(self.notifications_created),
        }


def classify_offset(offset):
    """
    Map a day offset to (kind, title, phrase).

    Returns None for offsets outside the lead-time thresholds.
    """
    return ALERT_LEVELS.get(offset)


def compose_message(deadline, phrase):
    """Message body naming the deadline and, if linked, its case number."""
    case_suffix = f' (Case: {deadline.case_number})' if deadline.case_number else ''
    return f'The deadline "{deadline.title}" {phrase}{case_suffix}'


def check_deadline_notifications(today=None, deadline_store=None, notification_store=None):
    """
    Scan incomplete deadlines due in 0, 1 or 3 days and create one
    notification per deadline per day.

    Args:
        today: Calendar date to scan for (default: local today)
        deadline_store: DeadlineStore-compatible object
        notification_store: NotificationStore-compatible object

    Returns:
        ScanResult with the ids of deadlines that got a new notification

    Raises:
        ScanError: If the candidate deadlines cannot be fetched

    Note:
        The dedup check is a read before the insert, not a constraint.
        Two scans running at the same moment can both insert.
    """
    today = today or timezone.localdate()
    deadline_store = deadline_store or DeadlineStore()
    notification_store = notification_store or NotificationStore()

    target_dates = [today + timedelta(days=offset) for offset in LEAD_TIME_OFFSETS]
    logger.info(
        'Checking deadlines for dates: ' + ', '.join(d.isoformat() for d in target_dates)
    )

    try:
        deadlines = deadline_store.query_deadlines(due_dates=target_dates, completed=False)
    except StoreError as e:
        logger.error(f'Error fetching deadlines: {e}')
        raise ScanError(str(e)) from e

    result = ScanResult(checked=len(deadlines))
    logger.info(f'Found {len(deadlines)} deadlines to check')

    for deadline in deadlines:
        if deadline.completed:
            continue

        level = classify_offset((deadline.due_date - today).days)
        if level is None:
            continue
        kind, title, phrase = level
        link = deadline.deep_link

        try:
            existing = notification_store.find_for_day(deadline.owner_id, link, today)
        except StoreError as e:
            logger.error(f'Error checking notifications for deadline {deadline.id}: {e}')
            continue

        if existing is not None:
            logger.debug(f'Notification already exists for deadline {deadline.id}')
            continue

        try:
            notification_store.insert(
                owner_id=deadline.owner_id,
                title=title,
                message=compose_message(deadline, phrase),
                kind=kind,
                link=link,
            )
        except StoreError as e:
            logger.error(f'Error creating notification for deadline {deadline.id}: {e}')
            continue

        logger.info(f'Created notification for deadline {deadline.id}: {title}')
        result.notifications_created.append(deadline.id)

    logger.info(result.message)
    return result
