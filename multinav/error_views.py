"""JSON error handlers and the exception-to-status mapping for API views."""
import logging
from functools import wraps

from django.core.exceptions import ValidationError
from django.http import JsonResponse

from apps.reports.summaries import NoReportDataError
from multinav.ai import ContractViolationError, NarrativeServiceError, NarrativeUnavailableError
from multinav.store import StorageError

logger = logging.getLogger(__name__)

# Exception messages that are safe to display to users.
_SAFE_MESSAGE_MAX_LENGTH = 500


def _safe_message(exception, default):
    message = str(exception) if exception else ""
    if not message or len(message) > _SAFE_MESSAGE_MAX_LENGTH:
        return default
    return message


def permission_denied_view(request, exception):
    """Custom 403 handler. Django calls this when PermissionDenied is raised."""
    return JsonResponse(
        {"error": _safe_message(exception, "You do not have access to this.")},
        status=403,
    )


def page_not_found_view(request, exception):
    return JsonResponse({"error": "Not found."}, status=404)


def json_errors(view_func):
    """Translate report, store and narrative failures into JSON responses.

        ValidationError            400 {"errors": [...]}
        NoReportDataError          404
        NarrativeUnavailableError  503
        NarrativeServiceError      502
        ContractViolationError     502
        StorageError               503
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ValidationError as exc:
            return JsonResponse({"errors": exc.messages}, status=400)
        except NoReportDataError as exc:
            return JsonResponse({"error": str(exc)}, status=404)
        except NarrativeUnavailableError as exc:
            return JsonResponse({"error": str(exc)}, status=503)
        except (NarrativeServiceError, ContractViolationError) as exc:
            logger.warning("Narrative insights failed on %s: %s", request.path, exc)
            return JsonResponse({"error": str(exc)}, status=502)
        except StorageError as exc:
            return JsonResponse({"error": str(exc)}, status=503)
    return wrapper
