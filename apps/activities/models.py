"""Health navigation activity records."""
from django.db import models
from django.utils import timezone

from apps.clients.models import generate_record_id

LOCATION_OPTIONS = ["Canning", "Gosnells", "Mandurah", "Stirling", "Swan", "Wanneroo"]

NAVIGATION_ASSISTANCE_OPTIONS = [
    "Appointment Scheduling",
    "Medicare Enrollment",
    "Care Coordination",
    "Patient Rights and Responsibilities",
    "Transport Assistance",
    "Interpreter Support",
    "Other Navigation Assistance",
]

SERVICES_ACCESSED_OPTIONS = [
    "GP / Primary Care",
    "Specialists",
    "Diagnostic Tests",
    "Alcohol and Other Drugs (AOD)",
    "Mental Health",
    "Domestic Violence Services",
    "Homelessness Support",
    "Dental",
    "Vision / Hearing",
    "Other Services",
]

EDUCATIONAL_RESOURCES_OPTIONS = [
    "Diabetes prevention and management",
    "Cardiovascular health / Hypertension",
    "Mental health support services",
    "Respiratory health / Asthma",
    "Medication adherence and safety",
    "Other Education Topics",
]

PREVENTIVE_SERVICES_OPTIONS = [
    "Immunisation",
    "Cervical Screening",
    "Breast Screening",
    "Bowel Screening",
]

MATERNAL_CHILD_HEALTH_OPTIONS = [
    "Prenatal / Pregnancy Services",
    "Infant / Child Health Checks",
    "Breastfeeding Support",
    "Child Development",
    "Family Planning",
]

# Tag field -> (sentinel tag, elaboration field)
OTHER_SENTINELS = {
    "navigation_assistance": ("Other Navigation Assistance", "other_assistance"),
    "services_accessed": ("Other Services", "other_services"),
    "educational_resources": ("Other Education Topics", "other_education"),
}

TAG_FIELD_OPTIONS = {
    "navigation_assistance": NAVIGATION_ASSISTANCE_OPTIONS,
    "services_accessed": SERVICES_ACCESSED_OPTIONS,
    "educational_resources": EDUCATIONAL_RESOURCES_OPTIONS,
    "preventive_services": PREVENTIVE_SERVICES_OPTIONS,
    "maternal_child_health": MATERNAL_CHILD_HEALTH_OPTIONS,
}

AUTHORSHIP_FIELDS = ("created_by", "created_by_name", "created_by_role", "created_at")


def generate_activity_id():
    return generate_record_id("A")


class Activity(models.Model):
    """One recorded instance of navigation support delivered to a client.

    client_id is a plain reference rather than a foreign key: deleting a
    client leaves its activities in place, and reports label them
    "Unknown Client".

    created_by / created_by_name / created_by_role are written once by the
    store when the activity is created. Rows imported before authorship was
    tracked leave all three blank.
    """

    LOCATION_CHOICES = [(value, value) for value in LOCATION_OPTIONS]

    id = models.CharField(primary_key=True, max_length=20, default=generate_activity_id, editable=False)
    client_id = models.CharField(max_length=20, db_index=True)
    date = models.DateField()
    location = models.CharField(max_length=30, choices=LOCATION_CHOICES, default="", blank=True)

    navigation_assistance = models.JSONField(default=list, blank=True)
    other_assistance = models.TextField(default="", blank=True)
    services_accessed = models.JSONField(default=list, blank=True)
    other_services = models.TextField(default="", blank=True)
    educational_resources = models.JSONField(default=list, blank=True)
    other_education = models.TextField(default="", blank=True)
    preventive_services = models.JSONField(default=list, blank=True)
    maternal_child_health = models.JSONField(default=list, blank=True)

    referrals_made = models.TextField(default="", blank=True)
    follow_up_actions = models.TextField(default="", blank=True)

    is_discharge = models.BooleanField(default=False)
    discharge_date = models.DateField(null=True, blank=True)
    discharge_reason = models.TextField(default="", blank=True)

    created_by = models.EmailField(default="", blank=True, db_index=True)
    created_by_name = models.CharField(max_length=255, default="", blank=True)
    created_by_role = models.CharField(max_length=20, default="", blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "activities"
        db_table = "activities"
        ordering = ["-date", "-created_at"]
        verbose_name_plural = "activities"

    def __str__(self):
        return f"Activity {self.pk} ({self.date})"
