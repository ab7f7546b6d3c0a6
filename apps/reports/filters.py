"""Dimension filters for report data.

Each criterion is an independent predicate; a record is kept when every
active predicate holds. Output keeps input order. Filters never consult
visibility: callers scope activities with apps.activities.access first.

A criterion value of "all" (or empty) places no constraint.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.utils.translation import gettext as _

from apps.activities.access import matches_staff_identity
from apps.activities.models import TAG_FIELD_OPTIONS
from apps.clients.models import UNKNOWN

ALL = "all"


@dataclass(frozen=True)
class ReportCriteria:
    """Filter settings for one report run."""

    date_from: date | None = None
    date_to: date | None = None
    region: str = ALL
    location: str = ALL
    staff: str = ALL
    ethnicity: str = ALL
    service: str = ALL
    service_field: str = "services_accessed"

    def __post_init__(self):
        # bounds may arrive as ISO strings; malformed ones fail here, before filtering
        object.__setattr__(self, "date_from", parse_report_date(self.date_from))
        object.__setattr__(self, "date_to", parse_report_date(self.date_to))

    @property
    def has_window(self) -> bool:
        return self.date_from is not None and self.date_to is not None


def is_unconstrained(value) -> bool:
    return value is None or value == "" or value == ALL


def parse_report_date(value) -> date | None:
    """Coerce a date, datetime or ISO string to a date. Blank means None.

    Raises ValidationError for anything that is not a recognisable date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_date(text)
            if parsed is None:
                moment = parse_datetime(text)
                parsed = _local_date(moment) if moment else None
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError(
        _("%(value)s is not a valid date (expected YYYY-MM-DD)."),
        code="invalid_date",
        params={"value": value},
    )


def _local_date(moment: datetime) -> date:
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return moment.date()


def validate_criteria(criteria: ReportCriteria) -> None:
    """Reject criteria that cannot describe a real selection."""
    if criteria.has_window and criteria.date_from > criteria.date_to:
        raise ValidationError(
            _("The start date (%(start)s) is after the end date (%(end)s)."),
            code="date_order",
            params={"start": criteria.date_from, "end": criteria.date_to},
        )
    if criteria.service_field not in TAG_FIELD_OPTIONS:
        raise ValidationError(
            _("Unknown service field %(field)s."),
            code="invalid_service_field",
            params={"field": criteria.service_field},
        )


def filter_records(records: Iterable, predicates: Iterable[Callable]) -> list:
    """Keep records that satisfy every predicate, in input order."""
    predicates = list(predicates)
    return [record for record in records if all(p(record) for p in predicates)]


# ------------------------------------------------------------------
# Predicate builders
# ------------------------------------------------------------------

def in_date_range(get_date: Callable, date_from: date | None, date_to: date | None) -> Callable:
    """Inclusive at both ends. A datetime anywhere on date_to's calendar day matches."""
    date_from = parse_report_date(date_from)
    date_to = parse_report_date(date_to)

    def predicate(record):
        value = get_date(record)
        if value is None or value == "":
            return False
        try:
            day = parse_report_date(value)
        except ValidationError:
            return False
        if date_from is not None and day < date_from:
            return False
        if date_to is not None and day > date_to:
            return False
        return True

    return predicate


def equals(get_value: Callable, expected: str) -> Callable:
    """Exact match. Expecting "Unknown" matches records with no value."""

    def predicate(record):
        value = get_value(record) or ""
        if expected == UNKNOWN:
            return value == "" or value == UNKNOWN
        return value == expected

    return predicate


def has_tag(get_tags: Callable, tag: str) -> Callable:
    def predicate(record):
        return tag in (get_tags(record) or ())

    return predicate


def authored_by_staff(email: str, full_name: str) -> Callable:
    def predicate(activity):
        return matches_staff_identity(activity, email, full_name)

    return predicate


def _attr(name: str) -> Callable:
    return lambda record: getattr(record, name, None)


def resolve_staff(staff: str, staff_roster: Iterable) -> tuple[str, str]:
    """Return (email, full_name) for a staff filter value.

    The filter value is normally an email; the roster supplies the display
    name used by the name-match rule.
    """
    wanted = staff.strip().lower()
    for account in staff_roster:
        if (account.email or "").lower() == wanted:
            return account.email, account.full_name
    return staff, ""


# ------------------------------------------------------------------
# Collection filters
# ------------------------------------------------------------------

def filter_clients(clients: Iterable, criteria: ReportCriteria) -> list:
    """Filter clients by referral date window, region and ethnicity."""
    validate_criteria(criteria)
    predicates = []
    if criteria.date_from is not None or criteria.date_to is not None:
        predicates.append(in_date_range(_attr("referral_date"), criteria.date_from, criteria.date_to))
    if not is_unconstrained(criteria.region):
        predicates.append(equals(_attr("region"), criteria.region))
    if not is_unconstrained(criteria.ethnicity):
        predicates.append(equals(_attr("ethnicity"), criteria.ethnicity))
    return filter_records(clients, predicates)


def filter_activities(
    activities: Iterable,
    criteria: ReportCriteria,
    clients_by_id: dict | None = None,
    staff_roster: Iterable = (),
) -> list:
    """Filter activities by date, client region/ethnicity, location, staff and service tag.

    Region and ethnicity are read from the activity's client; an activity
    whose client no longer exists only matches "Unknown".
    """
    validate_criteria(criteria)
    clients_by_id = clients_by_id or {}

    def client_attr(name):
        def get(activity):
            client = clients_by_id.get(getattr(activity, "client_id", None))
            return getattr(client, name, "") if client is not None else ""
        return get

    predicates = []
    if criteria.date_from is not None or criteria.date_to is not None:
        predicates.append(in_date_range(_attr("date"), criteria.date_from, criteria.date_to))
    if not is_unconstrained(criteria.region):
        predicates.append(equals(client_attr("region"), criteria.region))
    if not is_unconstrained(criteria.ethnicity):
        predicates.append(equals(client_attr("ethnicity"), criteria.ethnicity))
    if not is_unconstrained(criteria.location):
        predicates.append(equals(_attr("location"), criteria.location))
    if not is_unconstrained(criteria.staff):
        email, full_name = resolve_staff(criteria.staff, staff_roster)
        predicates.append(authored_by_staff(email, full_name))
    if not is_unconstrained(criteria.service):
        predicates.append(has_tag(_attr(criteria.service_field), criteria.service))
    return filter_records(activities, predicates)
