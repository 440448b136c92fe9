"""
Views for notifications app.

Includes:
- Notification popover feed (HTMX fragment, polled)
- Mark read / mark all read / delete / click-through
- Notification history with filters and bulk actions
- Deadline check bootstrap (once per session, once per day per browser)
- Deadline check endpoint for external schedulers
"""

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from django.db.models import Count, Q
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.utils import timezone
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from django_htmx.http import HttpResponseClientRedirect, trigger_client_event

from apps.deadlines.store import StoreError

from .alerts import BrowserAlerts
from .feed import FeedState, NotificationFeed
from .filters import NotificationFilter
from .forms import NotificationBulkForm
from .gate import CookieStorage, DailyGate, DeadlineCheckBootstrap
from .models import Notification
from .services import ScanError, check_deadline_notifications as run_scan
from .store import NotificationStore

logger = logging.getLogger(__name__)

# Items shown in the popover; the badge counts all unread
FEED_LIMIT = 20

CHANGED_EVENT = 'notifications-changed'
API_KEY_HEADER = 'X-Api-Key'


def _feed_for(request):
    alerts = BrowserAlerts.from_request(request)
    feed = NotificationFeed(
        request.user.pk,
        alerts=alerts,
        state=FeedState(request.session),
    )
    return feed, alerts


def _render_feed(request, feed, alerts):
    """Render the popover fragment; toasts ride along as an out-of-band swap."""
    alerts.flush(request)
    response = render(request, 'notifications/partials/feed.html', {
        'notifications': feed.notifications[:FEED_LIMIT],
        'unread_count': feed.unread_count,
        'oob_messages': True,
    })
    return alerts.flush(request, response)


# =============================================================================
# Popover Feed (HTMX)
# =============================================================================

@login_required
@require_GET
def notification_feed(request):
    """
    Popover fragment: unread badge and newest-first list.

    Requested on page load, every NOTIFICATION_POLL_SECONDS and on the
    notifications-changed client event.
    """
    feed, alerts = _feed_for(request)
    feed.refresh()
    return _render_feed(request, feed, alerts)


@login_required
@require_POST
def notification_mark_read(request, pk):
    """HTMX endpoint to mark one notification as read."""
    feed, alerts = _feed_for(request)
    with feed:
        feed.mark_read(pk)
    return _render_feed(request, feed, alerts)


@login_required
@require_POST
def notification_mark_all_read(request):
    """HTMX endpoint to mark every unread notification as read."""
    feed, alerts = _feed_for(request)
    with feed:
        feed.mark_all_read()
    return _render_feed(request, feed, alerts)


@login_required
@require_POST
def notification_delete(request, pk):
    """HTMX endpoint to delete one notification."""
    feed, alerts = _feed_for(request)
    with feed:
        feed.delete([pk])
    return _render_feed(request, feed, alerts)


@login_required
@require_POST
def notification_open(request, pk):
    """
    Click-through: mark read if unread, then follow the deep link.

    Without a deep link the popover is re-rendered in place.
    """
    notification = Notification.objects.filter(owner=request.user, pk=pk).first()
    if notification is None:
        return HttpResponse(
            '<div class="text-red-600 text-sm p-2">Notification not found</div>',
            status=404
        )

    feed, alerts = _feed_for(request)
    with feed:
        link = feed.open(notification)

    if link:
        alerts.flush(request)
        if request.htmx:
            return HttpResponseClientRedirect(link)
        return redirect(link)

    return _render_feed(request, feed, alerts)


# =============================================================================
# Notification History
# =============================================================================

@login_required
@require_http_methods(['GET', 'POST'])
def notification_list(request):
    """
    Full notification history with read-state/kind filters and bulk actions.
    """
    if request.method == 'POST':
        return _bulk_action(request)

    queryset = Notification.objects.filter(owner=request.user).order_by('-created_at', '-id')
    filterset = NotificationFilter(request.GET, queryset=queryset)

    counts = queryset.aggregate(
        total=Count('id'),
        unread=Count('id', filter=Q(read=False)),
    )
    counts['read'] = counts['total'] - counts['unread']

    # Pagination
    paginator = Paginator(filterset.qs, 20)
    page = request.GET.get('page', 1)

    try:
        notifications = paginator.page(page)
    except PageNotAnInteger:
        notifications = paginator.page(1)
    except EmptyPage:
        notifications = paginator.page(paginator.num_pages)

    context = {
        'filterset': filterset,
        'notifications': notifications,
        'counts': counts,
        'bulk_form': NotificationBulkForm(user=request.user),
    }

    if request.htmx:
        return render(request, 'notifications/partials/notification_table.html', context)

    return render(request, 'notifications/notification_list.html', context)


def _bulk_action(request):
    form = NotificationBulkForm(request.POST, user=request.user)
    if not form.is_valid():
        for error in form.non_field_errors() or ['Invalid action.']:
            messages.error(request, error)
        return redirect(request.get_full_path())

    action = form.cleaned_data['action']
    ids = form.selected_ids

    feed, alerts = _feed_for(request)
    with feed:
        if action == NotificationBulkForm.MARK_READ:
            if feed.mark_selected_read(ids):
                messages.success(request, f'{len(ids)} notification(s) marked as read.')
        elif action == NotificationBulkForm.DELETE:
            if feed.delete(ids):
                messages.success(request, f'{len(ids)} notification(s) deleted.')
        elif feed.mark_all_read():
            messages.success(request, 'All notifications marked as read.')

    alerts.flush(request)
    return redirect(request.get_full_path())


# =============================================================================
# Deadline Check
# =============================================================================

@login_required
@require_POST
def deadline_check_bootstrap(request):
    """
    Run the deadline scan on session bootstrap.

    Posted once by static/js/notifications.js when a page loads. Skipped
    when this session already ran it today or when the lastDeadlineCheck
    cookie says the scan already ran today.
    """
    today = timezone.localdate()
    alerts = BrowserAlerts.from_request(request)
    storage = CookieStorage(request)
    gate = DailyGate(storage, key=settings.DEADLINE_CHECK_COOKIE)
    bootstrap = DeadlineCheckBootstrap(
        gate,
        invoke=lambda: run_scan(today=today),
        session=request.session,
    )

    result = bootstrap.run(today)
    created = len(result.notifications_created) if result is not None else 0

    if created:
        alerts.toast(
            'info',
            'You have upcoming deadlines!',
            f'{created} deadline notification(s) created.',
        )
        try:
            urgent = NotificationStore().latest_unread_urgent(request.user.pk)
        except StoreError as e:
            logger.error(f'Error checking urgent notifications: {e}')
            urgent = None
        if urgent is not None:
            alerts.toast('warning', 'Attention! Urgent deadline', urgent.title)

    alerts.flush(request)
    response = render(request, 'partials/messages.html', {'oob_messages': True})
    storage.apply(response)

    if created:
        trigger_client_event(response, CHANGED_EVENT)
    return response


@csrf_exempt
@require_POST
def check_deadlines(request):
    """
    Run the deadline scan on demand.

    Accepted for a signed-in user or for an external scheduler sending
    the X-Api-Key header.

    Returns:
        200 {"success": true, "message": ..., "notifications_created": [...]}
        500 {"success": false, "error": ...} when the scan could not run
    """
    api_key = getattr(settings, 'DEADLINE_CHECK_API_KEY', '')
    presented = request.headers.get(API_KEY_HEADER, '')
    authorized = request.user.is_authenticated or (
        bool(api_key) and constant_time_compare(presented, api_key)
    )
    if not authorized:
        return JsonResponse({'success': False, 'error': 'Unauthorized'}, status=401)

    try:
        result = run_scan()
    except ScanError as e:
        logger.error(f'Deadline check failed: {e}')
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    return JsonResponse(result.as_dict())
