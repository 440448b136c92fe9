"""
Notification model.

Notifications are created by the deadline scanner (or other producers)
and only ever change their read flag afterwards.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone


class Notification(models.Model):
    """
    In-app notification for a single owner.

    Dedup key for deadline alerts: (owner, link, local creation day).
    It is checked by the scanner, not enforced by a constraint.
    """

    class Kind(models.TextChoices):
        INFO = 'info', 'Info'
        WARNING = 'warning', 'Warning'
        URGENT = 'urgent', 'Urgent'
        SUCCESS = 'success', 'Success'
        ERROR = 'error', 'Error'

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    kind = models.CharField(
        max_length=10,
        choices=Kind.choices,
        default=Kind.INFO,
    )
    read = models.BooleanField(default=False, db_index=True)
    link = models.CharField(
        max_length=255,
        blank=True,
        help_text='Deep-link path, e.g. /deadlines?id=42'
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = 'notification'
        verbose_name_plural = 'notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['owner', '-created_at'], name='notif_owner_created_idx'),
            models.Index(fields=['owner', 'link', 'created_at'], name='notif_owner_link_idx'),
            models.Index(fields=['owner', 'read'], name='notif_owner_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.owner}"

    @property
    def is_urgent(self):
        return self.kind == self.Kind.URGENT
