"""Per-staff KPI rollup.

Attribution follows the authorship rules in apps.activities.access: an
activity belongs to an account when its created_by email or created_by_name
matches. Unattributed (legacy) activities belong to exactly one account, the
legacy owner: LEGACY_ACTIVITY_OWNER_EMAIL when set, otherwise the first
admin in roster order. They are never counted against anyone else.
"""
from __future__ import annotations

from typing import Iterable

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _

from apps.activities.access import has_authorship, is_authored_by

from .aggregation import clients_served, navigation_item_count, service_item_count

# Column key -> (tag field, tag)
BREAKDOWN_COLUMNS = {
    "appointment_scheduling": ("navigation_assistance", "Appointment Scheduling"),
    "medicare_enrollment": ("navigation_assistance", "Medicare Enrollment"),
    "care_coordination": ("navigation_assistance", "Care Coordination"),
    "mental_health_services": ("services_accessed", "Mental Health"),
    "gp_services": ("services_accessed", "GP / Primary Care"),
}


def days_between(date_from, date_to) -> int:
    """Whole days between the window bounds, never less than 1."""
    return max(1, abs((date_to - date_from).days))


def legacy_owner(staff_roster: Iterable):
    """The account unattributed activities are credited to, or None."""
    roster = list(staff_roster)
    configured = (getattr(settings, "LEGACY_ACTIVITY_OWNER_EMAIL", "") or "").strip().lower()
    if configured:
        for account in roster:
            if (account.email or "").lower() == configured:
                return account
    for account in roster:
        if account.role == "admin":
            return account
    return None


def attributed_activities(activities: Iterable, account, is_legacy_owner: bool = False) -> list:
    result = []
    for activity in activities:
        if is_authored_by(activity, account.email, account.full_name):
            result.append(activity)
        elif is_legacy_owner and not has_authorship(activity):
            result.append(activity)
    return result


def per_staff_rollup(activities: Iterable, staff_roster: Iterable, criteria) -> list[dict]:
    """One KPI row per roster account, including accounts with no activity.

    Raises ValidationError without a complete date window, since the
    per-day average is undefined.
    """
    if criteria is None or criteria.date_from is None or criteria.date_to is None:
        raise ValidationError(
            _("A staff rollup needs both a start and an end date."), code="missing_window",
        )
    activities = list(activities)
    roster = list(staff_roster)
    owner = legacy_owner(roster)
    window_days = days_between(criteria.date_from, criteria.date_to)

    rows = []
    for account in roster:
        own = attributed_activities(activities, account, is_legacy_owner=account is owner)
        row = {
            "email": account.email,
            "full_name": account.full_name,
            "role": account.role,
            "assigned_locations": list(account.assigned_locations or ()),
            "activity_locations": _distinct_locations(own),
            "total_activities": len(own),
            "navigation_items": sum(navigation_item_count(a) for a in own),
            "service_items": sum(service_item_count(a) for a in own),
            "discharges": sum(1 for a in own if getattr(a, "is_discharge", False)),
            "clients_served": clients_served(own),
            "average_per_day": round(len(own) / window_days, 2),
        }
        for column, (field, tag) in BREAKDOWN_COLUMNS.items():
            row[column] = sum(1 for a in own if tag in (getattr(a, field, None) or ()))
        rows.append(row)
    return rows


def _distinct_locations(activities) -> list[str]:
    locations = []
    for activity in activities:
        location = getattr(activity, "location", "")
        if location and location not in locations:
            locations.append(location)
    return locations


def overall_staff_stats(activities: Iterable) -> dict:
    """Totals across the filtered activity set, independent of the roster."""
    activities = list(activities)
    authors = set()
    for activity in activities:
        identity = (getattr(activity, "created_by", "") or "").strip().lower() \
            or (getattr(activity, "created_by_name", "") or "").strip()
        if identity:
            authors.add(identity)
    total = len(activities)
    return {
        "total_activities": total,
        "total_clients": clients_served(activities),
        "total_staff": len(authors),
        "average_per_staff": round(total / len(authors), 1) if authors else 0,
    }
