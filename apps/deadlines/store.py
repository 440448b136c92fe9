"""
Store access for deadlines.

Views and the scanner read and write deadlines through DeadlineStore.
Every database failure surfaces as StoreError.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, List, Optional

from django.db import DatabaseError
from django.utils import timezone

from .models import Deadline

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Any failure of a store call (network, constraint, authorization)."""


@dataclass(frozen=True)
class DeadlineEntry:
    """
    Deadline as seen by the calendar and the scanner.

    The case join is normalized here into a single optional
    `case_number` field.
    """

    id: int
    owner_id: int
    title: str
    due_date: date
    category: str
    priority: str
    completed: bool
    description: str = ''
    case_number: Optional[str] = None

    @classmethod
    def from_model(cls, deadline):
        case = deadline.case if deadline.case_id else None
        return cls(
            id=deadline.pk,
            owner_id=deadline.owner_id,
            title=deadline.title,
            due_date=deadline.due_date,
            category=deadline.category,
            priority=deadline.priority,
            completed=deadline.completed,
            description=deadline.description,
            case_number=case.number if case else None,
        )

    def moved_to(self, due_date):
        return replace(self, due_date=due_date)

    @property
    def deep_link(self):
        return f'/deadlines?id={self.id}'

    def get_priority_display(self):
        return Deadline.Priority(self.priority).label

    def get_category_display(self):
        return Deadline.Category(self.category).label


class DeadlineStore:
    """ORM-backed deadline store."""

    def _base_queryset(self):
        return Deadline.objects.select_related('case')

    def query_deadlines(self, owner_id=None, start=None, end=None,
                        due_dates: Optional[Iterable[date]] = None,
                        completed: Optional[bool] = None) -> List[DeadlineEntry]:
        """
        Fetch deadlines matching the given filter.

        Args:
            owner_id: Restrict to one owner (None = all owners, scanner use)
            start/end: Inclusive due-date range
            due_dates: Exact due dates to match
            completed: Filter on the completion flag

        Raises:
            StoreError: If the query fails
        """
        queryset = self._base_queryset()
        if owner_id is not None:
            queryset = queryset.filter(owner_id=owner_id)
        if start is not None:
            queryset = queryset.filter(due_date__gte=start)
        if end is not None:
            queryset = queryset.filter(due_date__lte=end)
        if due_dates is not None:
            queryset = queryset.filter(due_date__in=list(due_dates))
        if completed is not None:
            queryset = queryset.filter(completed=completed)

        try:
            return [DeadlineEntry.from_model(d) for d in queryset.order_by('due_date', 'id')]
        except DatabaseError as e:
            logger.error(f'Failed to query deadlines: {e}')
            raise StoreError(str(e)) from e

    def update_deadline(self, owner_id, deadline_id, **patch):
        """
        Apply a field patch to one deadline of the owner.

        Raises:
            StoreError: If the deadline does not exist or the update fails
        """
        allowed = {'due_date', 'completed', 'title', 'description', 'priority', 'category'}
        unknown = set(patch) - allowed
        if unknown:
            raise ValueError(f"Cannot patch deadline fields: {', '.join(sorted(unknown))}")

        try:
            updated = Deadline.objects.filter(pk=deadline_id, owner_id=owner_id).update(
                updated_at=timezone.now(), **patch
            )
        except DatabaseError as e:
            logger.error(f'Failed to update deadline {deadline_id}: {e}')
            raise StoreError(str(e)) from e

        if not updated:
            raise StoreError(f'Deadline {deadline_id} not found.')
        return updated
