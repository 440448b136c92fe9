"""
Forms for notifications app.

Includes:
- NotificationBulkForm: Bulk actions on the notification history page
"""

from django import forms
from django.core.exceptions import ValidationError

from .models import Notification


class NotificationBulkForm(forms.Form):
    """
    Bulk action on selected notifications.

    The selectable ids are limited to the user's own notifications.
    """

    MARK_READ = 'mark_read'
    DELETE = 'delete'
    MARK_ALL_READ = 'mark_all_read'

    action = forms.ChoiceField(choices=[
        (MARK_READ, 'Mark selected as read'),
        (DELETE, 'Delete selected'),
        (MARK_ALL_READ, 'Mark all as read'),
    ])
    ids = forms.ModelMultipleChoiceField(
        queryset=Notification.objects.none(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    def __init__(self, *args, user=None, **kwargs):
        """
        Args:
            user: Current logged-in user (required)
        """
        super().__init__(*args, **kwargs)
        if user is not None:
            self.fields['ids'].queryset = Notification.objects.filter(owner=user)

    def clean(self):
        cleaned_data = super().clean()
        action = cleaned_data.get('action')
        if action in (self.MARK_READ, self.DELETE) and not cleaned_data.get('ids'):
            raise ValidationError('Select at least one notification.')
        return cleaned_data

    @property
    def selected_ids(self):
        return [n.pk for n in self.cleaned_data.get('ids') or []]
