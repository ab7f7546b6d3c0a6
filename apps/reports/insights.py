"""Shape report summaries for the narrative service and check what comes back.

Only aggregate keys cross this boundary. Distributions are cut to their
top-K entries so the request stays small, and anything that is not a known
aggregate key is dropped.
"""
import logging

from multinav.ai import ContractViolationError

logger = logging.getLogger(__name__)

CLIENT_SUMMARY_KEYS = {
    "total": "scalar",
    "average_age": "scalar",
    "ethnicities": "distribution",
    "referral_sources": "distribution",
    "regions": "distribution",
    "age_groups": "distribution",
}

ACTIVITY_SUMMARY_KEYS = {
    "total": "scalar",
    "total_items": "scalar",
    "total_navigation_items": "scalar",
    "total_service_items": "scalar",
    "total_discharges": "scalar",
    "clients_served": "scalar",
    "navigation_assistance": "distribution",
    "services_accessed": "distribution",
}

WORKFORCE_SUMMARY_KEYS = {
    "north_fte": "scalar",
    "south_fte": "scalar",
    "total_fte": "scalar",
    "headcount": "scalar",
    "languages": "list",
}

INSIGHT_KEYS = {"title", "insight", "recommendation"}


def _shape(summary, allowed, top_k):
    shaped = {}
    for key, kind in allowed.items():
        if key not in summary:
            continue
        value = summary[key]
        if kind == "distribution":
            shaped[key] = dict(list(dict(value).items())[:top_k])
        elif kind == "list":
            shaped[key] = list(value)[:top_k * 4]
        else:
            shaped[key] = value
    return shaped


def build_narrative_request(client_summary, activity_summary, workforce_summary, date_range, top_k=5):
    """Compact, PII-free request for the narrative service.

    date_range is a (start, end) pair of dates (or None for "all time").
    """
    start, end = date_range if date_range else (None, None)
    return {
        "client_summary": _shape(client_summary or {}, CLIENT_SUMMARY_KEYS, top_k),
        "activity_summary": _shape(activity_summary or {}, ACTIVITY_SUMMARY_KEYS, top_k),
        "workforce_summary": _shape(workforce_summary or {}, WORKFORCE_SUMMARY_KEYS, top_k),
        "date_range": {
            "start": start.isoformat() if start else "",
            "end": end.isoformat() if end else "",
        },
    }


def validate_insights(payload):
    """Return the payload as a list of insight dicts, or raise ContractViolationError.

    Each item must be a dict with non-empty string "title" and "insight";
    "recommendation" is optional but must be a string when present. Unknown
    keys are dropped. No repair is attempted.
    """
    if not isinstance(payload, list):
        logger.warning("Insights payload is %s, not a list", type(payload).__name__)
        raise ContractViolationError("Expected a list of insights.")

    insights = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ContractViolationError(f"Insight {index} is not an object.")
        for key in ("title", "insight"):
            if not isinstance(item.get(key), str) or not item[key].strip():
                raise ContractViolationError(f"Insight {index} has no {key}.")
        recommendation = item.get("recommendation")
        if recommendation is not None and not isinstance(recommendation, str):
            raise ContractViolationError(f"Insight {index} has a non-text recommendation.")
        insights.append({key: item[key] for key in INSIGHT_KEYS if item.get(key) is not None})
    return insights
