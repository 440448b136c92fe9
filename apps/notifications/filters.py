"""
Notification filters using django-filter.

Provides filtering for the notification history page:
- Read state (all, unread, read)
- Kind
"""

import django_filters
from django import forms

from .models import Notification


SELECT_CLASS = (
    'block w-full rounded-md border-gray-300 shadow-sm '
    'focus:border-indigo-500 focus:ring-indigo-500 sm:text-sm'
)


class NotificationFilter(django_filters.FilterSet):
    """
    Usage in views:
        filterset = NotificationFilter(request.GET, queryset=queryset)
        notifications = filterset.qs
    """

    state = django_filters.ChoiceFilter(
        method='filter_state',
        choices=[
            ('unread', 'Unread'),
            ('read', 'Read'),
        ],
        label='Show',
        empty_label='All',
        widget=forms.Select(attrs={
            'class': SELECT_CLASS,
            'hx-get': '',
            'hx-trigger': 'change',
            'hx-target': '#notification-list-container',
            'hx-push-url': 'true',
            'hx-include': '[name]',
        })
    )

    kind = django_filters.ChoiceFilter(
        choices=Notification.Kind.choices,
        label='Kind',
        empty_label='All kinds',
        widget=forms.Select(attrs={
            'class': SELECT_CLASS,
            'hx-get': '',
            'hx-trigger': 'change',
            'hx-target': '#notification-list-container',
            'hx-push-url': 'true',
            'hx-include': '[name]',
        })
    )

    class Meta:
        model = Notification
        fields = ['state', 'kind']

    def filter_state(self, queryset, name, value):
        if value == 'unread':
            return queryset.filter(read=False)
        if value == 'read':
            return queryset.filter(read=True)
        return queryset
