"""
Deadline models.

Models:
- Case: Minimal case record; only its display number is used here
- Deadline: Dated obligation (hearing, filing, meeting) owned by a user
"""

from django.db import models
from django.conf import settings
from django.utils import timezone


class Case(models.Model):
    """
    Law-office case.

    Case CRUD lives elsewhere; deadlines only need the display number
    to compose notification messages and calendar tooltips.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='cases',
    )
    number = models.CharField(
        max_length=50,
        db_index=True,
        help_text='Court case display number'
    )
    title = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'case'
        verbose_name_plural = 'cases'
        ordering = ['-created_at']

    def __str__(self):
        return self.number


class Deadline(models.Model):
    """
    Deadline tracked per owner, optionally linked to a case.

    The due date is a calendar date without a time component. Lapsed
    deadlines stay in the table; only the creation form rejects past dates.
    """

    class Category(models.TextChoices):
        HEARING = 'hearing', 'Hearing'
        PROCEDURAL = 'procedural_deadline', 'Procedural deadline'
        MEETING = 'meeting', 'Meeting'
        OTHER = 'other', 'Other'

    class Priority(models.TextChoices):
        HIGH = 'high', 'High'
        MEDIUM = 'medium', 'Medium'
        LOW = 'low', 'Low'

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='deadlines',
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    due_date = models.DateField(db_index=True)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.PROCEDURAL,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
        db_index=True,
    )
    completed = models.BooleanField(default=False, db_index=True)
    case = models.ForeignKey(
        Case,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='deadlines',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'deadline'
        verbose_name_plural = 'deadlines'
        ordering = ['due_date', 'id']
        indexes = [
            models.Index(fields=['owner', 'due_date'], name='deadline_owner_due_idx'),
            models.Index(fields=['completed', 'due_date'], name='deadline_completed_due_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.due_date:%d/%m/%Y})"

    @property
    def deep_link(self):
        """Path the notification feed navigates to for this deadline."""
        return f'/deadlines?id={self.pk}'

    @property
    def is_overdue(self):
        """Check if deadline is before today and not completed."""
        if self.completed:
            return False
        return self.due_date < timezone.localdate()
