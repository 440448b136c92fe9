"""
Tests for the deadline notification scanner and its entry points.
"""

import json
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from apps.deadlines.store import StoreError
from apps.notifications import tasks
from apps.notifications.models import Notification
from apps.notifications.services import (
    ScanError, check_deadline_notifications, classify_offset,
)
from apps.notifications.store import NotificationStore

pytestmark = pytest.mark.django_db


class FailingDeadlineStore:
    def query_deadlines(self, **kwargs):
        raise StoreError('connection refused')


class FlakyNotificationStore(NotificationStore):
    """Fails the insert for one deadline title."""

    def __init__(self, failing_title):
        self.failing_title = failing_title

    def insert(self, owner_id, title, message, kind=Notification.Kind.INFO, link=''):
        if self.failing_title in message:
            raise StoreError('insert rejected')
        return super().insert(owner_id, title, message, kind=kind, link=link)


# =============================================================================
# Classification
# =============================================================================

@pytest.mark.parametrize('offset, kind, title', [
    (0, Notification.Kind.URGENT, 'Deadline due TODAY!'),
    (1, Notification.Kind.WARNING, 'Deadline due tomorrow'),
    (3, Notification.Kind.INFO, 'Deadline due in 3 days'),
])
def test_lead_time_offsets_create_one_notification_each(make_deadline, user, today, offset, kind, title):
    deadline = make_deadline(offset)

    result = check_deadline_notifications(today=today)

    assert result.notifications_created == [deadline.pk]
    notification = Notification.objects.get(owner=user)
    assert notification.kind == kind
    assert notification.title == title
    assert notification.read is False
    assert notification.link == f'/deadlines?id={deadline.pk}'
    assert deadline.title in notification.message


@pytest.mark.parametrize('offset', [-1, 2, 4, 7, 30])
def test_other_offsets_never_notify(make_deadline, today, offset):
    make_deadline(offset)

    result = check_deadline_notifications(today=today)

    assert result.notifications_created == []
    assert not Notification.objects.exists()


def test_classify_offset_ignores_unknown_offsets():
    assert classify_offset(2) is None
    assert classify_offset(-3) is None
    assert classify_offset(0)[0] == Notification.Kind.URGENT


@pytest.mark.parametrize('offset', [0, 1, 3])
def test_completed_deadline_never_notifies(make_deadline, today, offset):
    make_deadline(offset, completed=True)

    result = check_deadline_notifications(today=today)

    assert result.checked == 0
    assert not Notification.objects.exists()


def test_message_names_the_linked_case(make_deadline, case, today):
    make_deadline(1, title='File appeal', case=case)

    check_deadline_notifications(today=today)

    notification = Notification.objects.get()
    assert notification.message == (
        f'The deadline "File appeal" is due tomorrow. (Case: {case.number})'
    )


def test_message_without_case(make_deadline, today):
    make_deadline(0, title='Hearing prep')

    check_deadline_notifications(today=today)

    assert Notification.objects.get().message == 'The deadline "Hearing prep" is due today!'


def test_each_owner_receives_own_notification(make_deadline, user, other_user, today):
    mine = make_deadline(0)
    theirs = make_deadline(3, owner=other_user)

    result = check_deadline_notifications(today=today)

    assert sorted(result.notifications_created) == sorted([mine.pk, theirs.pk])
    assert Notification.objects.get(owner=user).link == mine.deep_link
    assert Notification.objects.get(owner=other_user).link == theirs.deep_link


# =============================================================================
# Dedup
# =============================================================================

def test_second_scan_same_day_creates_nothing(make_deadline, today):
    for offset in (0, 1, 3):
        make_deadline(offset)

    first = check_deadline_notifications(today=today)
    second = check_deadline_notifications(today=today)

    assert len(first.notifications_created) == 3
    assert second.notifications_created == []
    assert second.checked == 3
    assert Notification.objects.count() == 3


def test_notification_from_a_previous_day_does_not_block(make_deadline, make_notification, today):
    deadline = make_deadline(1)
    make_notification(
        link=deadline.deep_link,
        created_at=timezone.now() - timedelta(days=2),
    )

    result = check_deadline_notifications(today=today)

    assert result.notifications_created == [deadline.pk]
    assert Notification.objects.count() == 2


def test_same_day_notification_of_another_owner_does_not_block(
        make_deadline, make_notification, other_user, today):
    deadline = make_deadline(0)
    make_notification(owner=other_user, link=deadline.deep_link)

    result = check_deadline_notifications(today=today)

    assert result.notifications_created == [deadline.pk]


# =============================================================================
# Failure handling
# =============================================================================

def test_fetch_failure_raises_scan_error():
    with pytest.raises(ScanError):
        check_deadline_notifications(deadline_store=FailingDeadlineStore())


def test_insert_failure_does_not_abort_scan(make_deadline, today):
    make_deadline(0, title='Broken')
    healthy = make_deadline(1, title='Healthy')

    result = check_deadline_notifications(
        today=today,
        notification_store=FlakyNotificationStore('Broken'),
    )

    assert result.checked == 2
    assert result.notifications_created == [healthy.pk]
    assert Notification.objects.count() == 1


def test_scan_result_message(make_deadline, today):
    make_deadline(0)
    make_deadline(5)

    result = check_deadline_notifications(today=today)

    assert result.message == 'Checked 1 deadlines, created 1 notifications'
    assert result.as_dict() == {
        'success': True,
        'message': 'Checked 1 deadlines, created 1 notifications',
        'notifications_created': result.notifications_created,
    }


# =============================================================================
# Entry points
# =============================================================================

def test_scheduled_task_returns_result_dict(make_deadline):
    deadline = make_deadline(0)

    result = tasks.check_deadline_notifications()

    assert result['success'] is True
    assert result['notifications_created'] == [deadline.pk]


def test_scheduled_task_propagates_scan_error(monkeypatch):
    def failing_scan():
        raise ScanError('down')

    monkeypatch.setattr(tasks, 'run_scan', failing_scan)

    with pytest.raises(ScanError):
        tasks.check_deadline_notifications()


def test_command_prints_json_result(make_deadline, today):
    deadline = make_deadline(3)
    out = StringIO()

    call_command('check_deadline_notifications', '--date', today.isoformat(), stdout=out)

    payload = json.loads(out.getvalue())
    assert payload['notifications_created'] == [deadline.pk]


def test_command_rejects_invalid_date():
    with pytest.raises(CommandError):
        call_command('check_deadline_notifications', '--date', '2025-13-45', stdout=StringIO())


def test_command_fails_when_scan_cannot_run(monkeypatch):
    from apps.notifications.management.commands import check_deadline_notifications as command

    def failing_scan(today=None):
        raise ScanError('down')

    monkeypatch.setattr(command, 'check_deadline_notifications', failing_scan)

    with pytest.raises(CommandError):
        call_command('check_deadline_notifications', stdout=StringIO())


def test_setup_schedules_is_idempotent(settings):
    from django_q.models import Schedule

    settings.DEADLINE_SCAN_CRON = '30 6 * * *'
    call_command('setup_schedules', stdout=StringIO())
    call_command('setup_schedules', stdout=StringIO())

    schedule = Schedule.objects.get()
    assert schedule.func == 'apps.notifications.tasks.check_deadline_notifications'
    assert schedule.schedule_type == Schedule.CRON
    assert schedule.cron == '30 6 * * *'
