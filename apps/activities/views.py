"""Activity log endpoints, always scoped to what the signed-in actor may see."""
import json
import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from apps.auth_app.decorators import requires_capability
from apps.reports.filters import filter_activities
from apps.reports.forms import ReportFilterForm
from multinav import store
from multinav.error_views import json_errors

from .access import can_edit_activity, scope_activities
from .models import Activity

logger = logging.getLogger(__name__)

_SERIALISED_FIELDS = [field.name for field in Activity._meta.concrete_fields]


def activity_to_dict(activity, actor=None):
    data = {name: getattr(activity, name) for name in _SERIALISED_FIELDS}
    if actor is not None:
        data["can_edit"] = can_edit_activity(activity, actor)
    return data


def _json_body(request):
    try:
        payload = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be JSON.") from None
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


@login_required
@require_http_methods(["GET", "POST"])
@requires_capability("activity-log")
@json_errors
def activity_list(request):
    """GET: the actor's visible activities, filterable. POST: record a new activity."""
    if request.method == "POST":
        activity = store.create_activity(request.user, _json_body(request))
        return JsonResponse(activity_to_dict(activity, request.user), status=201)

    form = ReportFilterForm(request.GET)
    if not form.is_valid():
        raise ValidationError(
            [e["message"] for errors in form.errors.get_json_data().values() for e in errors]
        )
    snapshot = store.fetch_snapshot()
    visible = scope_activities(snapshot.activities, request.user)
    activities = filter_activities(
        visible, form.to_criteria(), snapshot.clients_by_id, snapshot.staff_accounts,
    )
    return JsonResponse({
        "count": len(activities),
        "activities": [activity_to_dict(a, request.user) for a in activities],
    })


@login_required
@require_POST
@requires_capability("activity-log")
@json_errors
def activity_update(request, activity_id):
    activity = store.update_activity(request.user, activity_id, _json_body(request))
    return JsonResponse(activity_to_dict(activity, request.user))


@login_required
@require_POST
@requires_capability("activity-log")
@json_errors
def activity_delete(request, activity_id):
    store.delete_activity(request.user, activity_id)
    return JsonResponse({"deleted": activity_id})
