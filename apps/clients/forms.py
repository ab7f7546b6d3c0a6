"""Forms for client records."""
from django import forms
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from multinav.forms import TagListField

from .models import REFERRAL_SOURCE_OPTIONS, REGION_CHOICES, SEX_OPTIONS


class ClientForm(forms.Form):
    """Staff intake and edit form for a client.

    Region is required here even though the model tolerates a blank value
    on records that predate the field.
    """

    full_name = forms.CharField(max_length=255, label=_("Full name"))
    sex = forms.ChoiceField(
        choices=[("", _("— Select —"))] + [(value, value) for value in SEX_OPTIONS],
        required=False,
    )
    birth_date = forms.DateField(required=False, label=_("Date of birth"))
    ethnicity = forms.CharField(max_length=100, required=False)
    country_of_birth = forms.CharField(max_length=100, required=False)
    languages = TagListField()
    referral_source = forms.ChoiceField(
        choices=[("", _("— Select —"))] + [(value, value) for value in REFERRAL_SOURCE_OPTIONS],
        required=False,
    )
    referral_date = forms.DateField(required=False)
    address = forms.CharField(max_length=500, required=False)
    postcode = forms.CharField(max_length=10, required=False)
    region = forms.ChoiceField(choices=REGION_CHOICES, label=_("Region"))
    portal_password = forms.CharField(
        required=False, strip=False, min_length=8,
        help_text=_("Leave blank to keep the current portal password."),
    )

    def __init__(self, *args, as_of=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.as_of = as_of or timezone.localdate()

    def clean_birth_date(self):
        birth_date = self.cleaned_data.get("birth_date")
        if birth_date and birth_date > self.as_of:
            raise forms.ValidationError(_("Date of birth cannot be in the future."))
        return birth_date

    def clean_postcode(self):
        postcode = self.cleaned_data.get("postcode", "").strip()
        if postcode and not postcode.isdigit():
            raise forms.ValidationError(_("Postcode must contain digits only."))
        return postcode
