"""
Context processors for deadlines app.

Provides the overdue deadline count for the navigation badge.
"""

from django.utils import timezone


def deadline_counts(request):
    """
    Returns:
        dict with:
        - overdue_deadline_count: Incomplete deadlines of the user due before today
    """
    context = {
        'overdue_deadline_count': 0,
    }

    if not request.user.is_authenticated:
        return context

    from apps.deadlines.models import Deadline

    context['overdue_deadline_count'] = Deadline.objects.filter(
        owner=request.user,
        completed=False,
        due_date__lt=timezone.localdate(),
    ).count()

    return context
