"""Forms for staff sign-in and account administration."""
from django import forms
from django.utils.translation import gettext_lazy as _

from apps.activities.models import LOCATION_OPTIONS
from multinav.forms import TagListField

from .models import StaffAccount


class LoginForm(forms.Form):
    email = forms.EmailField(label=_("Email"))
    password = forms.CharField(label=_("Password"), strip=False, widget=forms.PasswordInput)


class StaffAccountForm(forms.Form):
    """Create or edit a staff account. Password is optional on edit."""

    email = forms.EmailField(label=_("Email"))
    full_name = forms.CharField(max_length=255, label=_("Full name"))
    role = forms.ChoiceField(choices=StaffAccount.ROLE_CHOICES, label=_("Role"))
    assigned_locations = TagListField(choices=LOCATION_OPTIONS)
    is_active = forms.BooleanField(required=False, initial=True)
    password = forms.CharField(required=False, strip=False, min_length=8, widget=forms.PasswordInput)

    def __init__(self, *args, instance=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.instance = instance
        if instance is None:
            self.fields["password"].required = True

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        clash = StaffAccount.objects.filter(email__iexact=email)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise forms.ValidationError(_("A staff account with this email already exists."))
        return email
