"""
Custom template tags and filters for deadlines app.

Usage in templates:
    {% load deadline_tags %}

    {# Filters #}
    {{ deadline|deadline_status }}
    {{ deadline|deadline_status|status_class }}
    {{ deadline.priority|priority_class }}
    {{ deadline.due_date|format_due_date }}
    {{ deadline.due_date|due_in }}
    {{ notification.kind|notification_kind_class }}

    {# Tags #}
    {% priority_badge deadline %}
    {% status_badge deadline %}
"""

from django import template
from django.utils import timezone
from django.utils.html import format_html

from apps.deadlines.calendar import classify
from apps.deadlines.models import Deadline

register = template.Library()

STATUS_LABELS = {
    'completed': 'Completed',
    'overdue': 'Overdue',
    'due_today': 'Due today',
    'upcoming': 'Upcoming',
}


# =============================================================================
# FILTERS - Status
# =============================================================================

@register.filter
def deadline_status(deadline):
    """
    Classify a deadline against today's local date.

    Returns one of: completed, overdue, due_today, upcoming

    Usage: {{ deadline|deadline_status }}
    """
    if not deadline:
        return ''
    return classify(deadline, timezone.localdate())


@register.filter
def status_class(status):
    """
    Return CSS class for a deadline status.

    - completed → deadline-muted
    - overdue → deadline-overdue
    - due_today → deadline-today
    - upcoming → deadline-upcoming

    Usage: {{ deadline|deadline_status|status_class }}
    """
    status_classes = {
        'completed': 'deadline-muted',
        'overdue': 'deadline-overdue',
        'due_today': 'deadline-today',
        'upcoming': 'deadline-upcoming',
    }
    return status_classes.get(status, '')


@register.filter
def priority_class(priority):
    """
    Return CSS accent class for deadline priority.

    Usage: {{ deadline.priority|priority_class }}
    """
    priority_classes = {
        'high': 'priority-high',
        'medium': 'priority-medium',
        'low': 'priority-low',
    }
    return priority_classes.get(priority, '')


@register.filter
def notification_kind_class(kind):
    """Usage: {{ notification.kind|notification_kind_class }}"""
    kind_classes = {
        'info': 'notification-info',
        'warning': 'notification-warning',
        'urgent': 'notification-urgent',
        'success': 'notification-success',
        'error': 'notification-error',
    }
    return kind_classes.get(kind, 'notification-info')


# =============================================================================
# FILTERS - Date Formatting
# =============================================================================

@register.filter
def format_due_date(value):
    """
    Format a due date as day/month/year.

    Usage: {{ deadline.due_date|format_due_date }}  →  15/01/2025
    """
    if not value:
        return ''
    return value.strftime('%d/%m/%Y')


@register.filter
def due_in(value):
    """
    Relative day indication for a due date.

    Examples:
    - "Today"
    - "Tomorrow"
    - "In 3 days"
    - "Yesterday"
    - "5 days ago"

    Usage: {{ deadline.due_date|due_in }}
    """
    if not value:
        return ''

    delta_days = (value - timezone.localdate()).days

    if delta_days == 0:
        return 'Today'
    elif delta_days == 1:
        return 'Tomorrow'
    elif delta_days == -1:
        return 'Yesterday'
    elif delta_days > 1:
        return f'In {delta_days} days'
    return f'{abs(delta_days)} days ago'


# =============================================================================
# SIMPLE TAGS - Badges
# =============================================================================

@register.simple_tag
def priority_badge(deadline):
    """
    Generate HTML badge for deadline priority.

    Usage: {% priority_badge deadline %}
    """
    if not deadline or not deadline.priority:
        return ''

    colors = {
        'low': 'bg-gray-100 text-gray-800',
        'medium': 'bg-blue-100 text-blue-800',
        'high': 'bg-red-100 text-red-800',
    }
    label = Deadline.Priority(deadline.priority).label

    return format_html(
        '<span class="inline-flex items-center px-2 py-0.5 rounded text-xs font-medium {}">'
        '{}</span>',
        colors.get(deadline.priority, 'bg-gray-100 text-gray-800'), label
    )


@register.simple_tag
def status_badge(deadline):
    """
    Generate HTML badge for the deadline status relative to today.

    Usage: {% status_badge deadline %}
    """
    if not deadline:
        return ''

    colors = {
        'completed': 'bg-gray-100 text-gray-500',
        'overdue': 'bg-red-100 text-red-800',
        'due_today': 'bg-amber-100 text-amber-800',
        'upcoming': 'bg-green-100 text-green-800',
    }
    status = deadline_status(deadline)

    return format_html(
        '<span class="inline-flex items-center px-2 py-0.5 rounded text-xs font-medium {}">'
        '{}</span>',
        colors.get(status, ''), STATUS_LABELS.get(status, status)
    )
