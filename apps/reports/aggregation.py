"""Aggregation engine for dashboards and reports.

Every function here is pure: it reads an already scoped and filtered list of
records and returns plain dicts/lists. Anything that depends on "now" (ages)
takes the evaluation instant as an explicit as_of argument.

Distributions are ordered by count, highest first; equal counts keep the
order in which their keys were first seen.
"""
from __future__ import annotations

import math
from collections import Counter
from datetime import date
from typing import Any, Callable, Iterable

from apps.clients.models import UNKNOWN

PYRAMID_BRACKETS = ["0-9", "10-19", "20-29", "30-39", "40-49", "50-59", "60-69", "70+"]

# (label, inclusive upper bound); the last group is open-ended
REPORT_AGE_GROUPS = [("0-17", 17), ("18-30", 30), ("31-50", 50), ("51-65", 65), ("65+", None)]


def count_by(records: Iterable, key_fn: Callable[[Any], Any]) -> dict[Any, int]:
    """Count records per key, sorted by count descending (ties: first seen)."""
    counter = Counter(key_fn(record) for record in records)
    return dict(counter.most_common())


def flatten_count_by(records: Iterable, multi_value_fn: Callable[[Any], Iterable]) -> dict[Any, int]:
    """Count tags across records; each distinct tag on a record adds one."""
    counter = Counter()
    for record in records:
        counter.update(_distinct(multi_value_fn(record)))
    return dict(counter.most_common())


def _distinct(values) -> list:
    return list(dict.fromkeys(values or ()))


def percent_of_total(count: int, total: int) -> float:
    """Share as a percentage to one decimal place; 0 when total is 0."""
    if not total:
        return 0
    return round(count / total * 100, 1)


def top_n(distribution: dict, n: int) -> dict:
    return dict(list(distribution.items())[:n])


def as_name_value(distribution: dict) -> list[dict]:
    """[{"name": key, "value": count}, ...] in distribution order, for charts."""
    return [{"name": name, "value": value} for name, value in distribution.items()]


def as_share_rows(distribution: dict, total: int) -> list[dict]:
    """Like as_name_value, with each bucket's percent of total added."""
    return [
        {"name": name, "value": value, "percent": percent_of_total(value, total)}
        for name, value in distribution.items()
    ]


def _or_unknown(value) -> str:
    return value or UNKNOWN


# ------------------------------------------------------------------
# Client distributions
# ------------------------------------------------------------------

def region_distribution(clients: Iterable) -> dict[str, int]:
    return count_by(clients, lambda c: _or_unknown(getattr(c, "region", "")))


def referral_source_distribution(clients: Iterable) -> dict[str, int]:
    return count_by(clients, lambda c: _or_unknown(getattr(c, "referral_source", "")))


def ethnicity_distribution(clients: Iterable) -> dict[str, int]:
    return count_by(clients, lambda c: _or_unknown(getattr(c, "ethnicity", "")))


def sex_distribution(clients: Iterable) -> dict[str, int]:
    return count_by(clients, lambda c: _or_unknown(getattr(c, "sex", "")))


def location_distribution(activities: Iterable) -> dict[str, int]:
    return count_by(activities, lambda a: _or_unknown(getattr(a, "location", "")))


# ------------------------------------------------------------------
# Ages
# ------------------------------------------------------------------

def age_bracket(age: int | None) -> str | None:
    """Pyramid bracket for an age: "0-9" ... "60-69", "70+". None stays None."""
    if age is None:
        return None
    if age < 0:
        raise ValueError(f"Age cannot be negative: {age}")
    if age >= 70:
        return "70+"
    low = (age // 10) * 10
    return f"{low}-{low + 9}"


def _client_age(client, as_of: date) -> int | None:
    age_on = getattr(client, "age_on", None)
    if age_on is not None:
        return age_on(as_of)
    return getattr(client, "age", None)


def population_pyramid(clients: Iterable, as_of: date) -> list[dict]:
    """One row per bracket, in bracket order.

    Male counts are negated so the two sides of the chart mirror each other;
    the absolute value is the count. Clients without an age or with a sex
    other than Male/Female are left out.
    """
    counts = {bracket: {"male": 0, "female": 0} for bracket in PYRAMID_BRACKETS}
    for client in clients:
        bracket = age_bracket(_client_age(client, as_of))
        if bracket is None:
            continue
        sex = getattr(client, "sex", "")
        if sex == "Male":
            counts[bracket]["male"] += 1
        elif sex == "Female":
            counts[bracket]["female"] += 1
    return [
        {"age_group": bracket, "male": -counts[bracket]["male"], "female": counts[bracket]["female"]}
        for bracket in PYRAMID_BRACKETS
    ]


def pyramid_scale(rows: list[dict]) -> int:
    """Symmetric axis limit: the largest bar plus 10%, rounded up."""
    largest = max((max(abs(row["male"]), row["female"]) for row in rows), default=0)
    return math.ceil(largest * 11 / 10)


def report_age_groups(clients: Iterable, as_of: date) -> dict[str, int]:
    """Counts per reporting age group, in group order, with an Unknown bucket."""
    groups = {label: 0 for label, _upper in REPORT_AGE_GROUPS}
    groups[UNKNOWN] = 0
    for client in clients:
        age = _client_age(client, as_of)
        if age is None:
            groups[UNKNOWN] += 1
            continue
        for label, upper in REPORT_AGE_GROUPS:
            if upper is None or age <= upper:
                groups[label] += 1
                break
    return groups


def average_age(clients: Iterable, as_of: date) -> float:
    """Mean age of clients with a birth date, one decimal place; 0 when none."""
    ages = [age for age in (_client_age(c, as_of) for c in clients) if age is not None]
    if not ages:
        return 0
    return round(sum(ages) / len(ages), 1)


# ------------------------------------------------------------------
# Activities
# ------------------------------------------------------------------

def _tags(record, field: str) -> list:
    return list(getattr(record, field, None) or ())


def _has_text(record, field: str) -> bool:
    return bool((getattr(record, field, None) or "").strip())


def navigation_item_count(activity) -> int:
    """Distinct navigation tags, plus one when "other" assistance is described."""
    tags = _distinct(_tags(activity, "navigation_assistance"))
    return len(tags) + int(_has_text(activity, "other_assistance"))


def service_item_count(activity) -> int:
    """Distinct service tags, plus one when "other" education is described."""
    tags = _distinct(_tags(activity, "services_accessed"))
    return len(tags) + int(_has_text(activity, "other_education"))


def activity_item_totals(activities: Iterable) -> dict[str, int]:
    """Navigation items, service items and discharges, plus their sum."""
    activities = list(activities)
    navigation = sum(navigation_item_count(a) for a in activities)
    services = sum(service_item_count(a) for a in activities)
    discharges = sum(1 for a in activities if getattr(a, "is_discharge", False))
    return {
        "total_navigation_items": navigation,
        "total_service_items": services,
        "total_discharges": discharges,
        "total_items": navigation + services + discharges,
    }


def clients_served(activities: Iterable) -> int:
    """Distinct client ids referenced by the activities."""
    return len({getattr(a, "client_id", None) for a in activities})


def navigation_distribution(activities: Iterable) -> dict[str, int]:
    return flatten_count_by(activities, lambda a: _tags(a, "navigation_assistance"))


def services_distribution(activities: Iterable) -> dict[str, int]:
    return flatten_count_by(activities, lambda a: _tags(a, "services_accessed"))


# ------------------------------------------------------------------
# Workforce
# ------------------------------------------------------------------

def workforce_summary(partitioned: dict) -> dict[str, Any]:
    """FTE per partition and overall, headcount, and languages in first-seen order."""
    north = list(partitioned.get("north", ()))
    south = list(partitioned.get("south", ()))
    north_fte = round(sum(float(e.fte or 0) for e in north), 2)
    south_fte = round(sum(float(e.fte or 0) for e in south), 2)
    languages = []
    for entry in north + south:
        for language in getattr(entry, "languages", None) or ():
            if language not in languages:
                languages.append(language)
    return {
        "north_fte": north_fte,
        "south_fte": south_fte,
        "total_fte": round(north_fte + south_fte, 2),
        "headcount": len(north) + len(south),
        "languages": languages,
    }
