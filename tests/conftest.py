"""
Shared fixtures for the lawdesk test suite.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.deadlines.models import Case, Deadline
from apps.notifications.models import Notification


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username='ana', password='secret-pass')


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username='bruno', password='secret-pass')


@pytest.fixture
def auth_client(client, user):
    client.force_login(user)
    return client


@pytest.fixture
def case(user):
    return Case.objects.create(owner=user, number='0001234-56.2025.8.26.0100', title='Silva v. Souza')


@pytest.fixture
def make_deadline(user, today):
    """Factory: make_deadline(offset=0, **fields) creates a deadline due today+offset."""
    def factory(offset=0, **fields):
        fields.setdefault('owner', user)
        fields.setdefault('title', f'Deadline {offset:+d}')
        if 'due_date' not in fields:
            fields['due_date'] = today + timedelta(days=offset)
        return Deadline.objects.create(**fields)
    return factory


@pytest.fixture
def make_notification(user):
    def factory(**fields):
        fields.setdefault('owner', user)
        fields.setdefault('title', 'Notice')
        fields.setdefault('message', 'Something happened')
        return Notification.objects.create(**fields)
    return factory
