"""Workforce (FTE) entries, held under a fixed north/south partition."""
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

PARTITION_CHOICES = [
    ("north", _("Perth North")),
    ("south", _("Perth South")),
]

PARTITIONS = tuple(key for key, _label in PARTITION_CHOICES)


class WorkforceEntry(models.Model):
    """One position in the program workforce."""

    partition = models.CharField(max_length=10, choices=PARTITION_CHOICES)
    fte = models.FloatField(default=0, validators=[MinValueValidator(0)])
    role = models.CharField(max_length=100, default="", blank=True)
    ethnicity = models.CharField(max_length=100, default="", blank=True)
    languages = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "workforce"
        db_table = "workforce_entries"
        ordering = ["partition", "id"]
        verbose_name_plural = "workforce entries"

    def __str__(self):
        return f"{self.role or 'Position'} ({self.partition}, {self.fte} FTE)"


def partition_workforce(entries):
    """Group entries as {"north": [...], "south": [...]}, preserving order."""
    grouped = {key: [] for key in PARTITIONS}
    for entry in entries:
        grouped.setdefault(entry.partition, []).append(entry)
    return grouped
