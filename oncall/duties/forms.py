"""
duties/forms.py
───────────────
Admin forms for publishing schedules and rejecting bookings, plus the
filter bar on the pending-approvals page.
"""

from django import forms

from .locations import duty_locations

WEEKDAY_CHOICES = [
    (0, 'Monday'),
    (1, 'Tuesday'),
    (2, 'Wednesday'),
    (3, 'Thursday'),
    (4, 'Friday'),
    (5, 'Saturday'),
    (6, 'Sunday'),
]

PERIOD_CHOICES = [
    ('all',   'All dates'),
    ('today', 'Today'),
    ('week',  'Next 7 days'),
    ('month', 'This month'),
]


def _location_choices():
    return [(loc.name, loc.name) for loc in duty_locations()]


class ScheduleForm(forms.Form):
    """One duty slot.  Empty shift / capacity fields fall back to the defaults."""

    date = forms.DateField(
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    location = forms.ChoiceField(choices=[])
    description = forms.CharField(max_length=200, required=False)
    shift_start = forms.TimeField(required=False, widget=forms.TimeInput(attrs={'type': 'time'}))
    shift_end = forms.TimeField(required=False, widget=forms.TimeInput(attrs={'type': 'time'}))
    max_students = forms.IntegerField(
        required=False,
        min_value=1,
        help_text='Leave empty to use the location default.',
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['location'].choices = _location_choices()

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('shift_start'), cleaned.get('shift_end')
        if start and end and end <= start:
            raise forms.ValidationError('The shift must end after it starts.')
        return cleaned


class GenerateSchedulesForm(forms.Form):
    """Bulk creation over a date range; the location rotates by month."""

    start_date = forms.DateField(
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    end_date = forms.DateField(
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    weekdays = forms.TypedMultipleChoiceField(
        choices=WEEKDAY_CHOICES,
        coerce=int,
        initial=[0, 1, 2, 3, 4],
        widget=forms.CheckboxSelectMultiple,
    )

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('start_date'), cleaned.get('end_date')
        if start and end and end < start:
            raise forms.ValidationError('The end date must not be before the start date.')
        return cleaned


class RejectForm(forms.Form):
    reason = forms.CharField(
        required=False,
        max_length=500,
        widget=forms.Textarea(attrs={'rows': 2, 'placeholder': 'Optional reason shown to the student…'}),
    )


class PendingFilterForm(forms.Form):
    location = forms.ChoiceField(required=False, choices=[])
    period = forms.ChoiceField(required=False, choices=PERIOD_CHOICES, initial='all')
    search = forms.CharField(required=False, max_length=100)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['location'].choices = [('all', 'All locations')] + _location_choices()

    def filters(self):
        """Keyword arguments for selectors.pending_bookings()."""
        if not self.is_valid():
            return {}
        return {
            'location': self.cleaned_data.get('location') or None,
            'period':   self.cleaned_data.get('period') or 'all',
            'search':   self.cleaned_data.get('search') or '',
        }


class ReportRangeForm(forms.Form):
    start_date = forms.DateField(
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    end_date = forms.DateField(
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
