"""Report endpoints: dashboard, program, unified, staff performance, AI insights.

Every endpoint loads a fresh snapshot, scopes it to the signed-in actor and
computes the report on the spot. Nothing is cached.
"""
import logging

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST
from django_ratelimit.decorators import ratelimit

from apps.auth_app.decorators import requires_capability
from multinav import ai
from multinav.error_views import json_errors
from multinav.forms import ProgramInsightsForm
from multinav.store import fetch_snapshot

from .export_engine import build_staff_performance_workbook, staff_performance_filename
from .filters import ReportCriteria
from .forms import ReportFilterForm, one_month_before
from .summaries import (
    build_dashboard, build_program_report, build_staff_performance, build_unified_report,
    program_narrative_request,
)

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _form_errors(form):
    return JsonResponse(
        {"errors": [e["message"] for errors in form.errors.get_json_data().values() for e in errors]},
        status=400,
    )


def _criteria_or_errors(request, default_window=None):
    """Return (criteria, None) or (None, 400 response)."""
    form = ReportFilterForm(request.GET)
    if not form.is_valid():
        return None, _form_errors(form)
    return form.to_criteria(default_window=default_window), None


def _narrative_top_k():
    return getattr(settings, "NARRATIVE_TOP_K", 5)


@login_required
@require_GET
@requires_capability("overview-dashboard")
@json_errors
def dashboard_view(request):
    report = build_dashboard(fetch_snapshot(), request.user, timezone.localdate())
    return JsonResponse(report)


@login_required
@require_GET
@requires_capability("program-report")
@json_errors
def program_report_view(request):
    """Program report for a period; ?insights=1 adds the AI summary."""
    criteria, errors = _criteria_or_errors(request)
    if errors:
        return errors
    report = build_program_report(fetch_snapshot(), request.user, criteria, timezone.localdate())
    if request.GET.get("insights") == "1":
        report["insights"] = ai.generate_report_insights(
            program_narrative_request(report, top_k=_narrative_top_k())
        )
    return JsonResponse(report)


@login_required
@require_GET
@requires_capability("unified-report")
@json_errors
def unified_report_view(request):
    criteria, errors = _criteria_or_errors(request)
    if errors:
        return errors
    report = build_unified_report(fetch_snapshot(), request.user, criteria, timezone.localdate())
    return JsonResponse(report)


def _staff_performance_report(request):
    today = timezone.localdate()
    criteria, errors = _criteria_or_errors(request, default_window=(one_month_before(today), today))
    if errors:
        return None, None, errors
    return criteria, build_staff_performance(fetch_snapshot(), request.user, criteria), None


@login_required
@require_GET
@requires_capability("staff-performance")
@json_errors
def staff_performance_view(request):
    """Staff KPIs. Defaults to the month ending today."""
    _criteria, report, errors = _staff_performance_report(request)
    if errors:
        return errors
    return JsonResponse(report)


@login_required
@require_GET
@requires_capability("staff-performance")
@json_errors
def staff_performance_export_view(request):
    criteria, report, errors = _staff_performance_report(request)
    if errors:
        return errors
    response = HttpResponse(build_staff_performance_workbook(report), content_type=XLSX_CONTENT_TYPE)
    filename = staff_performance_filename(criteria.date_from, criteria.date_to)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@login_required
@require_POST
@ratelimit(key="user", rate="20/h", method="POST", block=True)
@requires_capability("ai-insights")
@json_errors
def insights_view(request):
    """AI trends and recommendations over everything the actor can see."""
    form = ProgramInsightsForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)
    criteria = ReportCriteria(
        date_from=form.cleaned_data.get("date_from"),
        date_to=form.cleaned_data.get("date_to"),
    )
    report = build_program_report(fetch_snapshot(), request.user, criteria, timezone.localdate())
    insights = ai.generate_program_insights(
        program_narrative_request(report, top_k=_narrative_top_k()),
        focus=form.cleaned_data.get("focus", ""),
    )
    return JsonResponse({"insights": insights})
