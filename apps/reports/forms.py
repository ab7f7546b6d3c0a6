"""Report filter forms."""
import calendar
from datetime import date

from django import forms
from django.utils.translation import gettext_lazy as _

from apps.activities.models import LOCATION_OPTIONS, TAG_FIELD_OPTIONS
from apps.clients.models import REGION_CHOICES, UNKNOWN

from .filters import ALL, ReportCriteria

SERVICE_FIELD_CHOICES = [(name, name.replace("_", " ").capitalize()) for name in TAG_FIELD_OPTIONS]


def one_month_before(day):
    """Same day of the previous month, clamped to that month's length."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


class ReportFilterForm(forms.Form):
    """Parse report query parameters into ReportCriteria.

    Every field is optional; missing values mean "no constraint".
    """

    date_from = forms.DateField(required=False, label=_("Date from"))
    date_to = forms.DateField(required=False, label=_("Date to"))
    region = forms.ChoiceField(
        choices=[(ALL, _("All regions"))] + list(REGION_CHOICES) + [(UNKNOWN, _("Unknown"))],
        required=False,
    )
    location = forms.ChoiceField(
        choices=[(ALL, _("All locations"))] + [(value, value) for value in LOCATION_OPTIONS],
        required=False,
    )
    staff = forms.CharField(max_length=254, required=False, help_text=_("Staff email"))
    ethnicity = forms.CharField(max_length=100, required=False)
    service = forms.CharField(max_length=255, required=False)
    service_field = forms.ChoiceField(choices=SERVICE_FIELD_CHOICES, required=False)

    def clean(self):
        cleaned = super().clean()
        date_from = cleaned.get("date_from")
        date_to = cleaned.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise forms.ValidationError(_("The start date must be before the end date."))
        return cleaned

    def to_criteria(self, default_window=None):
        """Build ReportCriteria from cleaned data.

        default_window, a (date_from, date_to) pair, fills in whichever
        bounds the request left out.
        """
        data = self.cleaned_data
        date_from = data.get("date_from")
        date_to = data.get("date_to")
        if default_window is not None:
            date_from = date_from or default_window[0]
            date_to = date_to or default_window[1]
        return ReportCriteria(
            date_from=date_from,
            date_to=date_to,
            region=data.get("region") or ALL,
            location=data.get("location") or ALL,
            staff=(data.get("staff") or "").strip().lower() or ALL,
            ethnicity=(data.get("ethnicity") or "").strip() or ALL,
            service=(data.get("service") or "").strip() or ALL,
            service_field=data.get("service_field") or "services_accessed",
        )
