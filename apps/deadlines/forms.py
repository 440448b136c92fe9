"""
Forms for deadlines app.

Includes:
- CalendarDropForm: Validate a drag-and-drop reschedule from the calendar
"""

from django import forms

from .calendar import MONTH, VIEW_MODES


class CalendarDropForm(forms.Form):
    """
    Posted by static/js/calendar.js when a deadline card is dropped on a
    day cell. `view` and `anchor` describe the period being displayed so
    the grid can be re-rendered in place.
    """

    deadline_id = forms.IntegerField(min_value=1)
    target = forms.DateField(input_formats=['%Y-%m-%d'])
    view = forms.ChoiceField(
        choices=[(mode, mode.title()) for mode in VIEW_MODES],
        required=False,
    )
    anchor = forms.DateField(input_formats=['%Y-%m-%d'], required=False)

    def clean_view(self):
        return self.cleaned_data.get('view') or MONTH
