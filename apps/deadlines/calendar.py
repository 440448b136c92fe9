"""
Calendar scheduling board.

Builds the month/week grid of an owner's deadlines and handles
drag-and-drop rescheduling:

- A drop on the deadline's current day is a no-op (no store write)
- Otherwise the in-memory list is patched first, then the store is updated
- If the store update fails the in-memory patch is rolled back

Status classification is computed against "today" at render time and is
never stored.
"""

import calendar as pycalendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from .store import DeadlineEntry, DeadlineStore, StoreError

logger = logging.getLogger(__name__)

MONTH = 'month'
WEEK = 'week'
VIEW_MODES = (MONTH, WEEK)

# Entries shown per day cell before collapsing into "+N more"
VISIBLE_PER_DAY = {
    MONTH: 3,
    WEEK: 5,
}

WEEKDAY_LABELS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

COMPLETED = 'completed'
OVERDUE = 'overdue'
DUE_TODAY = 'due_today'
UPCOMING = 'upcoming'


def classify(entry, today):
    """Return completed / overdue / due_today / upcoming for one deadline."""
    if entry.completed:
        return COMPLETED
    if entry.due_date < today:
        return OVERDUE
    if entry.due_date == today:
        return DUE_TODAY
    return UPCOMING


def start_of_week(day):
    """Sunday on or before the given day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def period_bounds(view, anchor):
    """
    First and last day shown by the grid.

    Month view spans whole weeks (Sunday to Saturday) around the month.
    """
    if view == WEEK:
        start = start_of_week(anchor)
        return start, start + timedelta(days=6)

    first = anchor.replace(day=1)
    last = anchor.replace(day=pycalendar.monthrange(anchor.year, anchor.month)[1])
    start = start_of_week(first)
    end = start_of_week(last) + timedelta(days=6)
    return start, end


def shift_period(view, anchor, steps):
    """Anchor of the previous (steps=-1) or next (steps=1) period."""
    if view == WEEK:
        return anchor + timedelta(days=7 * steps)

    month_index = anchor.year * 12 + (anchor.month - 1) + steps
    year, month = divmod(month_index, 12)
    month += 1
    day = min(anchor.day, pycalendar.monthrange(year, month)[1])
    return date(year, month, day)


def period_label(view, anchor):
    """'January 2025' for month view, '05/01 - 11/01/2025' for week view."""
    if view == WEEK:
        start, end = period_bounds(WEEK, anchor)
        return f'{start:%d/%m} - {end:%d/%m/%Y}'
    return f'{pycalendar.month_name[anchor.month]} {anchor.year}'


@dataclass
class DayCell:
    day: date
    deadlines: List[DeadlineEntry]
    visible_cap: int
    in_period: bool = True
    is_today: bool = False
    has_overdue: bool = False

    @property
    def visible(self):
        return self.deadlines[:self.visible_cap]

    @property
    def overflow(self):
        return max(0, len(self.deadlines) - self.visible_cap)


@dataclass
class DropResult:
    MOVED = 'moved'
    UNCHANGED = 'unchanged'
    FAILED = 'failed'
    MISSING = 'missing'

    status: str
    message: Optional[str] = None
    entry: Optional[DeadlineEntry] = None

    @property
    def ok(self):
        return self.status in (self.MOVED, self.UNCHANGED)


@dataclass
class CalendarBoard:
    """
    In-memory deadline list for the displayed period of one owner.

    The store remains the source of truth; the list is only the
    optimistic view of the current interaction.
    """

    owner_id: int
    today: date
    entries: List[DeadlineEntry] = field(default_factory=list)
    store: DeadlineStore = field(default_factory=DeadlineStore)

    @classmethod
    def load(cls, owner_id, view, anchor, today, store=None):
        """
        Fetch the owner's deadlines for the grid of (view, anchor).

        Raises:
            StoreError: If the deadlines cannot be fetched
        """
        store = store or DeadlineStore()
        start, end = period_bounds(view, anchor)
        entries = store.query_deadlines(owner_id=owner_id, start=start, end=end)
        return cls(owner_id=owner_id, today=today, entries=list(entries), store=store)

    # =========================================================================
    # Rendering
    # =========================================================================

    def for_day(self, day):
        return [e for e in self.entries if e.due_date == day]

    def status_of(self, entry):
        return classify(entry, self.today)

    def grid(self, view, anchor):
        """List of weeks, each a list of seven DayCell."""
        start, end = period_bounds(view, anchor)
        cap = VISIBLE_PER_DAY.get(view, VISIBLE_PER_DAY[MONTH])

        cells = []
        day = start
        while day <= end:
            deadlines = self.for_day(day)
            cells.append(DayCell(
                day=day,
                deadlines=deadlines,
                visible_cap=cap,
                in_period=(view == WEEK or day.month == anchor.month),
                is_today=(day == self.today),
                has_overdue=any(classify(e, self.today) == OVERDUE for e in deadlines),
            ))
            day += timedelta(days=1)

        return [cells[i:i + 7] for i in range(0, len(cells), 7)]

    def month_stats(self, anchor):
        """Totals for deadlines inside the anchor's month."""
        in_month = [
            e for e in self.entries
            if e.due_date.year == anchor.year and e.due_date.month == anchor.month
        ]
        statuses = [classify(e, self.today) for e in in_month]
        return {
            'total': len(in_month),
            'completed': statuses.count(COMPLETED),
            'overdue': statuses.count(OVERDUE),
            'pending': statuses.count(DUE_TODAY) + statuses.count(UPCOMING),
        }

    # =========================================================================
    # Drag and drop
    # =========================================================================

    def _index_of(self, deadline_id):
        for index, entry in enumerate(self.entries):
            if entry.id == deadline_id:
                return index
        return None

    def drop(self, deadline_id, target):
        """
        Move a deadline to the target day.

        Returns:
            DropResult with status moved / unchanged / failed / missing
        """
        index = self._index_of(deadline_id)
        if index is None:
            return DropResult(DropResult.MISSING, 'Deadline not found.')

        original = self.entries[index]
        if original.due_date == target:
            return DropResult(DropResult.UNCHANGED, entry=original)

        moved = original.moved_to(target)
        self.entries[index] = moved

        try:
            self.store.update_deadline(self.owner_id, deadline_id, due_date=target)
        except StoreError as e:
            logger.error(f'Error moving deadline {deadline_id} to {target}: {e}')
            self.entries[index] = original
            return DropResult(
                DropResult.FAILED,
                'Could not update the deadline date.',
                entry=original,
            )

        logger.info(f'Deadline {deadline_id} moved from {original.due_date} to {target}')
        return DropResult(
            DropResult.MOVED,
            f'Deadline "{original.title}" moved to {target:%d/%m/%Y}',
            entry=moved,
        )
