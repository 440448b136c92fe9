"""
Views for deadlines app.

Includes:
- Calendar (month/week grid with period navigation and month stats)
- Calendar drop (HTMX drag-and-drop reschedule)
- Calendar day (overflow list for a day cell)
- Deadline list (deep-link target of deadline notifications)
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from django.http import HttpResponse
from django.shortcuts import render
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.http import require_GET, require_POST

from .calendar import (
    MONTH, VIEW_MODES, WEEKDAY_LABELS, CalendarBoard, DropResult,
    period_label, shift_period,
)
from .filters import DeadlineFilter
from .forms import CalendarDropForm
from .models import Deadline
from .store import DeadlineStore, StoreError

logger = logging.getLogger(__name__)

LOAD_ERROR = 'Could not load deadlines.'


def _parse_day(value):
    """Parse YYYY-MM-DD, returning None for missing or invalid input."""
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


def _load_board(request, view, anchor, today):
    """Load the board for the period, or an empty one with an error toast."""
    try:
        return CalendarBoard.load(request.user.pk, view, anchor, today)
    except StoreError as e:
        logger.error(f'Error loading calendar for user {request.user.pk}: {e}')
        messages.error(request, LOAD_ERROR)
        return CalendarBoard(owner_id=request.user.pk, today=today)


def _calendar_context(board, view, anchor):
    return {
        'board': board,
        'weeks': board.grid(view, anchor),
        'weekday_labels': WEEKDAY_LABELS,
        'view': view,
        'anchor': anchor,
        'today': board.today,
        'period_label': period_label(view, anchor),
        'previous_anchor': shift_period(view, anchor, -1),
        'next_anchor': shift_period(view, anchor, 1),
        'stats': board.month_stats(anchor),
        'view_modes': VIEW_MODES,
    }


# =============================================================================
# Calendar Views
# =============================================================================

@login_required
@require_GET
def calendar_view(request):
    """
    Month or week calendar of the user's deadlines.

    Query params:
        view: month (default) | week
        date: YYYY-MM-DD inside the period to display (default today)
    """
    today = timezone.localdate()
    view = request.GET.get('view', MONTH)
    if view not in VIEW_MODES:
        view = MONTH
    anchor = _parse_day(request.GET.get('date')) or today

    board = _load_board(request, view, anchor, today)
    context = _calendar_context(board, view, anchor)

    # Handle HTMX partial requests (period navigation)
    if request.htmx:
        return render(request, 'deadlines/partials/calendar_grid.html', context)

    return render(request, 'deadlines/calendar.html', context)


@login_required
@require_POST
def calendar_drop(request):
    """
    HTMX endpoint to reschedule a deadline via drag-and-drop.

    Re-renders the calendar grid from the board's in-memory list: the
    moved card on success, the rolled-back card on failure.
    """
    form = CalendarDropForm(request.POST)
    if not form.is_valid():
        return HttpResponse(
            '<div class="text-red-600 text-sm p-2">Invalid drop</div>',
            status=400
        )

    today = timezone.localdate()
    view = form.cleaned_data['view']
    target = form.cleaned_data['target']
    anchor = form.cleaned_data['anchor'] or target

    try:
        board = CalendarBoard.load(request.user.pk, view, anchor, today)
    except StoreError as e:
        logger.error(f'Error loading calendar for drop by user {request.user.pk}: {e}')
        return HttpResponse(
            f'<div class="text-red-600 text-sm p-2">{LOAD_ERROR}</div>',
            status=503
        )

    result = board.drop(form.cleaned_data['deadline_id'], target)

    if result.status == DropResult.MISSING:
        return HttpResponse(
            '<div class="text-red-600 text-sm p-2">Deadline not found</div>',
            status=404
        )
    if result.status == DropResult.MOVED:
        messages.success(request, result.message)
    elif result.status == DropResult.FAILED:
        messages.error(request, result.message)

    context = _calendar_context(board, view, anchor)
    context['oob_messages'] = True
    return render(request, 'deadlines/partials/calendar_grid.html', context)


@login_required
@require_GET
def calendar_day(request, day):
    """
    HTMX fragment listing every deadline of one day (the "+N more" overflow).
    """
    date = _parse_day(day)
    if date is None:
        return HttpResponse(
            '<div class="text-red-600 text-sm p-2">Invalid date</div>',
            status=400
        )

    try:
        deadlines = DeadlineStore().query_deadlines(
            owner_id=request.user.pk, start=date, end=date
        )
    except StoreError as e:
        logger.error(f'Error loading deadlines for {date}: {e}')
        return HttpResponse(
            f'<div class="text-red-600 text-sm p-2">{LOAD_ERROR}</div>',
            status=503
        )

    return render(request, 'deadlines/partials/day_list.html', {
        'day': date,
        'deadlines': deadlines,
    })


# =============================================================================
# Deadline List View
# =============================================================================

@login_required
@require_GET
def deadline_list(request):
    """
    Deadline list with filters.

    `?id=<pk>` highlights one deadline; notifications link here.
    """
    queryset = Deadline.objects.filter(
        owner=request.user
    ).select_related('case').order_by('due_date', 'id')

    filterset = DeadlineFilter(request.GET, queryset=queryset)

    highlight_id = request.GET.get('id')
    highlight_id = int(highlight_id) if highlight_id and highlight_id.isdigit() else None

    # Pagination
    paginator = Paginator(filterset.qs, 25)
    page = request.GET.get('page', 1)

    try:
        deadlines = paginator.page(page)
    except PageNotAnInteger:
        deadlines = paginator.page(1)
    except EmptyPage:
        deadlines = paginator.page(paginator.num_pages)

    context = {
        'filterset': filterset,
        'deadlines': deadlines,
        'highlight_id': highlight_id,
        'highlighted': (
            queryset.filter(pk=highlight_id).first() if highlight_id else None
        ),
    }

    if request.htmx:
        return render(request, 'deadlines/partials/deadline_table.html', context)

    return render(request, 'deadlines/deadline_list.html', context)
