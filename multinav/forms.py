"""Shared form fields and the forms used by the narrative endpoints."""
from django import forms
from django.utils.translation import gettext_lazy as _


class TagListField(forms.Field):
    """A repeated-choice field whose value is an ordered list of distinct tags.

    Accepts a list (JSON payloads, QueryDict.getlist) or a "; "-separated
    string (CSV imports). When choices are given, every tag must be one of
    them.
    """

    widget = forms.SelectMultiple
    default_error_messages = {
        "invalid_choice": _("%(value)s is not one of the available options."),
        "invalid_list": _("Enter a list of values."),
    }

    def __init__(self, *, choices=None, **kwargs):
        kwargs.setdefault("required", False)
        super().__init__(**kwargs)
        self.choices = list(choices) if choices is not None else None

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            value = value.split(";")
        elif not isinstance(value, (list, tuple, set, frozenset)):
            raise forms.ValidationError(self.error_messages["invalid_list"], code="invalid_list")
        tags = []
        for item in value:
            tag = str(item).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    def validate(self, value):
        super().validate(value)
        if self.choices is None:
            return
        for tag in value:
            if tag not in self.choices:
                raise forms.ValidationError(
                    self.error_messages["invalid_choice"],
                    code="invalid_choice",
                    params={"value": tag},
                )


class ProgramInsightsForm(forms.Form):
    """Form for the AI insights endpoint."""

    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
    focus = forms.CharField(max_length=500, required=False)

    def clean(self):
        cleaned = super().clean()
        date_from = cleaned.get("date_from")
        date_to = cleaned.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise forms.ValidationError(_("The start date must be before the end date."))
        return cleaned
