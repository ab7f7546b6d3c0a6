"""Report builders: scope, filter, then aggregate one snapshot.

Every builder applies activity visibility for the actor before any
criteria, so a navigator's reports only ever count activities they may see.
Client records are not scoped by role.
"""
import logging

from apps.activities.access import scope_activities

from . import aggregation as agg
from .filters import filter_activities, filter_clients, is_unconstrained, validate_criteria
from .insights import build_narrative_request
from .staff_performance import overall_staff_stats, per_staff_rollup

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"


class NoReportDataError(Exception):
    """Neither clients nor activities match the report criteria."""


def _date_range(criteria):
    return {"start": criteria.date_from, "end": criteria.date_to}


def _visible_filtered_activities(snapshot, actor, criteria):
    return filter_activities(
        scope_activities(snapshot.activities, actor),
        criteria,
        snapshot.clients_by_id,
        snapshot.staff_accounts,
    )


def _activity_summary(activities):
    return {
        "total": len(activities),
        **agg.activity_item_totals(activities),
        "navigation_assistance": agg.navigation_distribution(activities),
        "services_accessed": agg.services_distribution(activities),
    }


def build_dashboard(snapshot, actor, as_of):
    """Headline numbers and charts for the overview dashboard."""
    activities = scope_activities(snapshot.activities, actor)
    pyramid = agg.population_pyramid(snapshot.clients, as_of)
    return {
        "total_clients": len(snapshot.clients),
        "total_activities": len(activities),
        "total_fte": agg.workforce_summary(snapshot.workforce)["total_fte"],
        "ethnicity_distribution": agg.as_share_rows(
            agg.ethnicity_distribution(snapshot.clients), len(snapshot.clients)
        ),
        "top_navigation_assistance": agg.as_name_value(
            agg.top_n(agg.navigation_distribution(activities), 5)
        ),
        "population_pyramid": pyramid,
        "pyramid_scale": agg.pyramid_scale(pyramid),
    }


def build_program_report(snapshot, actor, criteria, as_of):
    """Client, activity and workforce summaries for a reporting period.

    Raises NoReportDataError when nothing matches, rather than returning a
    report of zeros.
    """
    validate_criteria(criteria)
    clients = filter_clients(snapshot.clients, criteria)
    activities = _visible_filtered_activities(snapshot, actor, criteria)
    if not clients and not activities:
        logger.info("Program report: no data for %s to %s", criteria.date_from, criteria.date_to)
        raise NoReportDataError("No clients or activities match the selected criteria.")

    return {
        "date_range": _date_range(criteria),
        "client_summary": {
            "total": len(clients),
            "average_age": agg.average_age(clients, as_of),
            "ethnicities": agg.ethnicity_distribution(clients),
            "referral_sources": agg.referral_source_distribution(clients),
            "regions": agg.region_distribution(clients),
        },
        "activity_summary": _activity_summary(activities),
        "workforce_summary": agg.workforce_summary(snapshot.workforce),
    }


def build_unified_report(snapshot, actor, criteria, as_of):
    """Cross-cutting client and activity statistics for the unified report."""
    validate_criteria(criteria)
    clients = filter_clients(snapshot.clients, criteria)
    activities = _visible_filtered_activities(snapshot, actor, criteria)
    served = agg.clients_served(activities)
    ethnicities = agg.ethnicity_distribution(clients)
    referral_sources = agg.referral_source_distribution(clients)
    regions = agg.region_distribution(clients)
    return {
        "date_range": _date_range(criteria),
        "client_stats": {
            "total": len(clients),
            "ethnicities": ethnicities,
            "referral_sources": referral_sources,
            "regions": regions,
            "ethnicity_shares": agg.as_share_rows(ethnicities, len(clients)),
            "referral_source_shares": agg.as_share_rows(referral_sources, len(clients)),
            "region_shares": agg.as_share_rows(regions, len(clients)),
            "sexes": agg.sex_distribution(clients),
            "age_groups": agg.report_age_groups(clients, as_of),
            "average_age": agg.average_age(clients, as_of),
        },
        "activity_stats": {
            **_activity_summary(activities),
            "locations": agg.location_distribution(activities),
            "clients_served": served,
            "average_activities_per_client": round(len(activities) / served, 1) if served else 0,
        },
    }


def build_staff_performance(snapshot, actor, criteria):
    """KPI rows per staff account, overall totals and the detailed activity log."""
    activities = _visible_filtered_activities(snapshot, actor, criteria)
    staff_rows = per_staff_rollup(activities, snapshot.staff_accounts, criteria)
    if not is_unconstrained(criteria.staff):
        staff_rows = [row for row in staff_rows if row["email"].lower() == criteria.staff.lower()]

    clients_by_id = snapshot.clients_by_id
    detailed = []
    for activity in activities:
        client = clients_by_id.get(activity.client_id)
        detailed.append({
            "date": activity.date,
            "staff_name": activity.created_by_name or "Unknown",
            "staff_email": activity.created_by or "Unknown",
            "location": activity.location or "Not specified",
            "client_id": activity.client_id,
            "client_name": client.full_name if client is not None else UNKNOWN_CLIENT,
            "navigation_assistance": list(activity.navigation_assistance or ()),
            "services_accessed": list(activity.services_accessed or ()),
            "is_discharge": bool(activity.is_discharge),
            "follow_up_actions": activity.follow_up_actions or "",
        })

    return {
        "date_range": _date_range(criteria),
        "staff": staff_rows,
        "overall": overall_staff_stats(activities),
        "activities": detailed,
    }


def program_narrative_request(report, top_k=5):
    """Narrative request for a program report built by build_program_report()."""
    date_range = report.get("date_range") or {}
    return build_narrative_request(
        report["client_summary"],
        report["activity_summary"],
        report["workforce_summary"],
        (date_range.get("start"), date_range.get("end")),
        top_k=top_k,
    )
