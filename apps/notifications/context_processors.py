"""
Context processors for notifications app.

Provides the unread badge count and the feed polling interval.
"""

from django.conf import settings


def notification_counts(request):
    """
    Returns:
        dict with:
        - unread_notification_count: Unread notifications of the current user
        - notification_poll_seconds: Popover refresh interval
    """
    context = {
        'unread_notification_count': 0,
        'notification_poll_seconds': getattr(settings, 'NOTIFICATION_POLL_SECONDS', 30),
    }

    if not request.user.is_authenticated:
        return context

    from apps.notifications.models import Notification

    context['unread_notification_count'] = Notification.objects.filter(
        owner=request.user,
        read=False,
    ).count()

    return context
