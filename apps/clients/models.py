"""Client record model with encrypted PII fields."""
import secrets
import string
from datetime import date

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils.translation import gettext_lazy as _

from multinav.encryption import DecryptionError, decrypt_field, encrypt_field

SEX_OPTIONS = ["Male", "Female", "Intersex", "Other", "Prefer not to say"]

REFERRAL_SOURCE_OPTIONS = [
    "GP", "NGO", "Community Org", "Hospital", "Family/Friend", "Self", "Other",
]

REGION_CHOICES = [
    ("North", _("Perth North")),
    ("South", _("Perth South")),
]

UNKNOWN = "Unknown"

_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_record_id(prefix):
    """Short random identifier, e.g. C4F2A1X."""
    return prefix + "".join(secrets.choice(_ID_ALPHABET) for _i in range(6))


def generate_client_id():
    return generate_record_id("C")


def calculate_age(birth_date, as_of):
    """Whole years between birth_date and as_of, or None without a birth date.

    as_of may be a date or datetime; it is always explicit so that callers
    decide what "now" means.
    """
    if not birth_date:
        return None
    if hasattr(as_of, "date"):
        as_of = as_of.date()
    age = as_of.year - birth_date.year
    if (as_of.month, as_of.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


class Client(models.Model):
    """A person receiving health navigation support."""

    SEX_CHOICES = [(value, value) for value in SEX_OPTIONS]

    id = models.CharField(primary_key=True, max_length=20, default=generate_client_id, editable=False)

    # Encrypted PII
    _full_name_encrypted = models.BinaryField(default=b"")
    _birth_date_encrypted = models.BinaryField(default=b"", blank=True)
    _address_encrypted = models.BinaryField(default=b"", blank=True)

    sex = models.CharField(max_length=30, choices=SEX_CHOICES, default="", blank=True)
    ethnicity = models.CharField(max_length=100, default="", blank=True)
    country_of_birth = models.CharField(max_length=100, default="", blank=True)
    languages = models.JSONField(default=list, blank=True)

    referral_source = models.CharField(max_length=100, default="", blank=True)
    referral_date = models.DateField(null=True, blank=True)

    postcode = models.CharField(max_length=10, default="", blank=True)
    # Blank only on legacy records; the staff form requires it.
    region = models.CharField(max_length=10, choices=REGION_CHOICES, default="", blank=True)

    portal_password = models.CharField(max_length=128, default="", blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "clients"
        db_table = "clients"
        ordering = ["created_at", "id"]

    def __str__(self):
        return self.full_name or f"Client {self.pk}"

    # Encrypted property accessors
    @property
    def full_name(self):
        try:
            return decrypt_field(self._full_name_encrypted)
        except DecryptionError:
            return "[DECRYPTION ERROR]"

    @full_name.setter
    def full_name(self, value):
        self._full_name_encrypted = encrypt_field(value)

    @property
    def birth_date(self):
        try:
            value = decrypt_field(self._birth_date_encrypted)
        except DecryptionError:
            return None
        return date.fromisoformat(value) if value else None

    @birth_date.setter
    def birth_date(self, value):
        self._birth_date_encrypted = encrypt_field(value.isoformat() if value else "")

    @property
    def address(self):
        try:
            return decrypt_field(self._address_encrypted)
        except DecryptionError:
            return "[DECRYPTION ERROR]"

    @address.setter
    def address(self, value):
        self._address_encrypted = encrypt_field(value)

    def age_on(self, as_of):
        """Age in whole years at as_of, or None when no birth date is recorded."""
        return calculate_age(self.birth_date, as_of)

    # Portal credential
    def set_portal_password(self, raw_password):
        self.portal_password = make_password(raw_password)

    def check_portal_password(self, raw_password):
        if not self.portal_password:
            return False
        return check_password(raw_password, self.portal_password)
