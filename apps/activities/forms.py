"""Forms for recording health navigation activities."""
from django import forms
from django.utils.translation import gettext_lazy as _

from multinav.forms import TagListField

from .models import (
    EDUCATIONAL_RESOURCES_OPTIONS, LOCATION_OPTIONS, MATERNAL_CHILD_HEALTH_OPTIONS,
    NAVIGATION_ASSISTANCE_OPTIONS, OTHER_SENTINELS, PREVENTIVE_SERVICES_OPTIONS,
    SERVICES_ACCESSED_OPTIONS,
)


class ActivityForm(forms.Form):
    """Create or edit an activity. Authorship is never a form field."""

    client_id = forms.CharField(max_length=20, label=_("Client"))
    date = forms.DateField(label=_("Date"))
    location = forms.ChoiceField(
        choices=[("", _("— Select —"))] + [(value, value) for value in LOCATION_OPTIONS],
        required=False,
    )

    navigation_assistance = TagListField(choices=NAVIGATION_ASSISTANCE_OPTIONS)
    other_assistance = forms.CharField(required=False, widget=forms.Textarea)
    services_accessed = TagListField(choices=SERVICES_ACCESSED_OPTIONS)
    other_services = forms.CharField(required=False, widget=forms.Textarea)
    educational_resources = TagListField(choices=EDUCATIONAL_RESOURCES_OPTIONS)
    other_education = forms.CharField(required=False, widget=forms.Textarea)
    preventive_services = TagListField(choices=PREVENTIVE_SERVICES_OPTIONS)
    maternal_child_health = TagListField(choices=MATERNAL_CHILD_HEALTH_OPTIONS)

    referrals_made = forms.CharField(required=False, widget=forms.Textarea)
    follow_up_actions = forms.CharField(required=False, widget=forms.Textarea)

    is_discharge = forms.BooleanField(required=False)
    discharge_date = forms.DateField(required=False)
    discharge_reason = forms.CharField(required=False, widget=forms.Textarea)

    def clean(self):
        cleaned = super().clean()

        # An elaboration only makes sense alongside its "Other" tag
        for tag_field, (sentinel, elaboration_field) in OTHER_SENTINELS.items():
            tags = cleaned.get(tag_field) or []
            elaboration = (cleaned.get(elaboration_field) or "").strip()
            if elaboration and sentinel not in tags:
                self.add_error(
                    elaboration_field,
                    _("Select \"%(sentinel)s\" to describe it.") % {"sentinel": sentinel},
                )
            cleaned[elaboration_field] = elaboration

        if cleaned.get("is_discharge"):
            if not cleaned.get("discharge_date"):
                self.add_error("discharge_date", _("Discharge date is required for a discharge."))
            elif cleaned.get("date") and cleaned["discharge_date"] < cleaned["date"]:
                self.add_error("discharge_date", _("Discharge date cannot be before the activity date."))
        else:
            cleaned["discharge_date"] = None
            cleaned["discharge_reason"] = ""

        return cleaned
