"""Client list export."""
import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps.auth_app.decorators import requires_capability
from apps.reports.export_engine import client_csv_filename, export_clients_csv
from apps.reports.filters import filter_clients
from apps.reports.forms import ReportFilterForm
from multinav.error_views import json_errors
from multinav.store import fetch_clients

logger = logging.getLogger(__name__)


@login_required
@require_GET
@requires_capability("client-records")
@json_errors
def client_export_csv(request):
    """Download the client list, optionally narrowed by referral date, region or ethnicity."""
    form = ReportFilterForm(request.GET)
    if not form.is_valid():
        return HttpResponse("Invalid filter.", status=400, content_type="text/plain")
    today = timezone.localdate()
    clients = filter_clients(fetch_clients(), form.to_criteria())
    response = HttpResponse(export_clients_csv(clients, today), content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{client_csv_filename(today)}"'
    logger.info("Client CSV exported by account %s (%d rows)", request.user.pk, len(clients))
    return response
