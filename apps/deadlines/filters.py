"""
Deadline filters using django-filter.

Provides filtering for the deadline list page:
- Status filter (pending, overdue, completed)
- Priority filter (multi-select)
- Category filter (multi-select)
- Search (title, description, case number)
"""

import django_filters
from django import forms
from django.db.models import Q
from django.utils import timezone

from .models import Deadline


SELECT_CLASS = (
    'block w-full rounded-md border-gray-300 shadow-sm '
    'focus:border-indigo-500 focus:ring-indigo-500 sm:text-sm'
)
CHECKBOX_CLASS = 'h-4 w-4 rounded border-gray-300 text-indigo-600 focus:ring-indigo-500'


class DeadlineFilter(django_filters.FilterSet):
    """
    Deadline filter for the list view.

    Usage in views:
        filterset = DeadlineFilter(request.GET, queryset=queryset)
        deadlines = filterset.qs
    """

    search = django_filters.CharFilter(
        method='filter_search',
        label='Search',
        widget=forms.TextInput(attrs={
            'placeholder': 'Search deadlines...',
            'class': SELECT_CLASS,
            'hx-get': '',
            'hx-trigger': 'keyup changed delay:300ms',
            'hx-target': '#deadline-list-container',
            'hx-push-url': 'true',
            'hx-include': '[name]',
        })
    )

    status = django_filters.ChoiceFilter(
        method='filter_status',
        choices=[
            ('pending', 'Pending'),
            ('overdue', 'Overdue'),
            ('completed', 'Completed'),
        ],
        label='Status',
        empty_label='All',
        widget=forms.Select(attrs={
            'class': SELECT_CLASS,
            'hx-get': '',
            'hx-trigger': 'change',
            'hx-target': '#deadline-list-container',
            'hx-push-url': 'true',
            'hx-include': '[name]',
        })
    )

    priority = django_filters.MultipleChoiceFilter(
        choices=Deadline.Priority.choices,
        widget=forms.CheckboxSelectMultiple(attrs={'class': CHECKBOX_CLASS}),
        label='Priority'
    )

    category = django_filters.MultipleChoiceFilter(
        choices=Deadline.Category.choices,
        widget=forms.CheckboxSelectMultiple(attrs={'class': CHECKBOX_CLASS}),
        label='Category'
    )

    class Meta:
        model = Deadline
        fields = ['search', 'status', 'priority', 'category']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(case__number__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        """
        pending: incomplete and due today or later
        overdue: incomplete and due before today
        completed: completion flag set
        """
        today = timezone.localdate()
        if value == 'pending':
            return queryset.filter(completed=False, due_date__gte=today)
        if value == 'overdue':
            return queryset.filter(completed=False, due_date__lt=today)
        if value == 'completed':
            return queryset.filter(completed=True)
        return queryset
