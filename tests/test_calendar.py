"""
Tests for the calendar board: grid building, classification and
drag-and-drop rescheduling.
"""

from datetime import date, timedelta

import pytest

from apps.deadlines.calendar import (
    COMPLETED, DUE_TODAY, MONTH, OVERDUE, UPCOMING, WEEK,
    CalendarBoard, DropResult, classify, period_bounds, period_label,
    shift_period, start_of_week,
)
from apps.deadlines.models import Deadline
from apps.deadlines.store import DeadlineEntry, DeadlineStore, StoreError

TODAY = date(2025, 1, 10)


def entry(id=1, due=TODAY, completed=False, title='Contestação', **kwargs):
    return DeadlineEntry(
        id=id,
        owner_id=1,
        title=title,
        due_date=due,
        category=kwargs.get('category', Deadline.Category.PROCEDURAL),
        priority=kwargs.get('priority', Deadline.Priority.MEDIUM),
        completed=completed,
        case_number=kwargs.get('case_number'),
    )


class RecordingStore:
    """Deadline store fake that records update calls."""

    def __init__(self, fail=False):
        self.fail = fail
        self.updates = []

    def update_deadline(self, owner_id, deadline_id, **patch):
        self.updates.append((owner_id, deadline_id, patch))
        if self.fail:
            raise StoreError('network down')
        return 1


def board_with(*entries, store=None):
    return CalendarBoard(owner_id=1, today=TODAY, entries=list(entries), store=store or RecordingStore())


# =============================================================================
# Classification
# =============================================================================

@pytest.mark.parametrize('due, completed, expected', [
    (TODAY - timedelta(days=1), True, COMPLETED),
    (TODAY + timedelta(days=5), True, COMPLETED),
    (TODAY - timedelta(days=1), False, OVERDUE),
    (TODAY, False, DUE_TODAY),
    (TODAY + timedelta(days=1), False, UPCOMING),
])
def test_classify(due, completed, expected):
    assert classify(entry(due=due, completed=completed), TODAY) == expected


# =============================================================================
# Grid and navigation
# =============================================================================

def test_start_of_week_is_sunday():
    assert start_of_week(date(2025, 1, 10)) == date(2025, 1, 5)
    assert start_of_week(date(2025, 1, 5)) == date(2025, 1, 5)
    assert start_of_week(date(2025, 1, 11)) == date(2025, 1, 5)


def test_month_bounds_span_whole_weeks():
    start, end = period_bounds(MONTH, date(2025, 1, 20))

    assert start == date(2024, 12, 29)
    assert end == date(2025, 2, 1)
    assert start.weekday() == 6
    assert ((end - start).days + 1) % 7 == 0


def test_week_bounds():
    assert period_bounds(WEEK, TODAY) == (date(2025, 1, 5), date(2025, 1, 11))


def test_month_grid_shape():
    weeks = board_with().grid(MONTH, TODAY)

    assert len(weeks) == 5
    assert all(len(week) == 7 for week in weeks)
    assert weeks[0][0].day == date(2024, 12, 29)
    assert weeks[0][0].in_period is False
    assert weeks[0][3].day == date(2025, 1, 1)
    assert weeks[0][3].in_period is True


def test_grid_marks_today_and_overdue():
    board = board_with(entry(1, due=date(2025, 1, 8)))
    cells = {cell.day: cell for week in board.grid(MONTH, TODAY) for cell in week}

    assert cells[TODAY].is_today is True
    assert cells[date(2025, 1, 8)].has_overdue is True
    assert cells[date(2025, 1, 9)].has_overdue is False


@pytest.mark.parametrize('view, cap', [(MONTH, 3), (WEEK, 5)])
def test_day_cell_caps_visible_entries(view, cap):
    entries = [entry(i, due=TODAY) for i in range(1, 8)]
    cells = {cell.day: cell for week in board_with(*entries).grid(view, TODAY) for cell in week}

    cell = cells[TODAY]
    assert len(cell.visible) == cap
    assert cell.overflow == 7 - cap
    assert len(cell.deadlines) == 7


def test_no_overflow_under_cap():
    cells = {cell.day: cell for week in board_with(entry()).grid(MONTH, TODAY) for cell in week}
    assert cells[TODAY].overflow == 0


def test_period_labels():
    assert period_label(MONTH, date(2025, 1, 10)) == 'January 2025'
    assert period_label(WEEK, date(2025, 1, 10)) == '05/01 - 11/01/2025'


@pytest.mark.parametrize('view, anchor, steps, expected', [
    (MONTH, date(2025, 1, 31), 1, date(2025, 2, 28)),
    (MONTH, date(2025, 1, 15), -1, date(2024, 12, 15)),
    (MONTH, date(2024, 12, 15), 1, date(2025, 1, 15)),
    (WEEK, date(2025, 1, 10), 1, date(2025, 1, 17)),
    (WEEK, date(2025, 1, 10), -1, date(2025, 1, 3)),
])
def test_shift_period(view, anchor, steps, expected):
    assert shift_period(view, anchor, steps) == expected


def test_month_stats_only_count_displayed_month():
    board = board_with(
        entry(1, due=date(2025, 1, 2)),                    # overdue
        entry(2, due=date(2025, 1, 3), completed=True),    # completed
        entry(3, due=TODAY),                               # pending (today)
        entry(4, due=date(2025, 1, 20)),                   # pending
        entry(5, due=date(2024, 12, 30)),                  # previous month, in grid
    )

    assert board.month_stats(TODAY) == {
        'total': 4,
        'completed': 1,
        'overdue': 1,
        'pending': 2,
    }


# =============================================================================
# Drag and drop
# =============================================================================

def test_drop_on_same_day_is_a_no_op():
    store = RecordingStore()
    board = board_with(entry(1, due=TODAY), store=store)

    result = board.drop(1, TODAY)

    assert result.status == DropResult.UNCHANGED
    assert result.message is None
    assert store.updates == []
    assert board.entries[0].due_date == TODAY


def test_drop_moves_optimistically_and_confirms():
    store = RecordingStore()
    board = board_with(entry(1, due=TODAY, title='Contestação'), store=store)

    result = board.drop(1, date(2025, 1, 15))

    assert result.status == DropResult.MOVED
    assert result.ok is True
    assert result.message == 'Deadline "Contestação" moved to 15/01/2025'
    assert store.updates == [(1, 1, {'due_date': date(2025, 1, 15)})]
    assert board.for_day(date(2025, 1, 15))[0].id == 1
    assert board.for_day(TODAY) == []


def test_failed_drop_rolls_back():
    store = RecordingStore(fail=True)
    board = board_with(entry(1, due=TODAY), entry(2, due=TODAY), store=store)

    result = board.drop(1, date(2025, 1, 15))

    assert result.status == DropResult.FAILED
    assert result.ok is False
    assert result.message == 'Could not update the deadline date.'
    assert [e.due_date for e in board.entries] == [TODAY, TODAY]
    assert len(store.updates) == 1


def test_drop_unknown_deadline():
    store = RecordingStore()
    result = board_with(entry(1), store=store).drop(99, TODAY)

    assert result.status == DropResult.MISSING
    assert store.updates == []


# =============================================================================
# Against the database
# =============================================================================

@pytest.mark.django_db
def test_drop_and_drop_back_updates_store(make_deadline):
    deadline = make_deadline(due_date=date(2025, 1, 10), title='Réplica')
    board = CalendarBoard.load(deadline.owner_id, MONTH, date(2025, 1, 10), TODAY)

    first = board.drop(deadline.pk, date(2025, 1, 15))
    deadline.refresh_from_db()
    assert deadline.due_date == date(2025, 1, 15)
    assert '15/01/2025' in first.message
    assert 'Réplica' in first.message

    second = board.drop(deadline.pk, date(2025, 1, 10))
    deadline.refresh_from_db()
    assert deadline.due_date == date(2025, 1, 10)
    assert second.status == DropResult.MOVED
    assert second.message == 'Deadline "Réplica" moved to 10/01/2025'


@pytest.mark.django_db
def test_load_only_fetches_owner_deadlines_in_grid(make_deadline, other_user):
    mine = make_deadline(due_date=date(2025, 1, 20))
    make_deadline(due_date=date(2025, 1, 20), owner=other_user)
    make_deadline(due_date=date(2025, 3, 1))

    board = CalendarBoard.load(mine.owner_id, MONTH, TODAY, TODAY)

    assert [e.id for e in board.entries] == [mine.pk]


@pytest.mark.django_db
def test_store_normalizes_case_number(make_deadline, case):
    deadline = make_deadline(due_date=TODAY, case=case)
    make_deadline(due_date=TODAY, title='No case')

    entries = DeadlineStore().query_deadlines(owner_id=deadline.owner_id)

    assert [e.case_number for e in entries] == [case.number, None]


@pytest.mark.django_db
def test_store_update_of_missing_deadline_raises(user):
    with pytest.raises(StoreError):
        DeadlineStore().update_deadline(user.pk, 12345, due_date=TODAY)


@pytest.mark.django_db
def test_store_update_rejects_unknown_fields(make_deadline):
    deadline = make_deadline()
    with pytest.raises(ValueError, match='case_id'):
        DeadlineStore().update_deadline(deadline.owner_id, deadline.pk, case_id=2)
