"""Capability-based access decorators for views."""
from functools import wraps

from django.http import HttpResponseForbidden

from .permissions import ALL_CAPABILITIES, has_capability, role_for_user


def requires_capability(capability):
    """Decorator: return 403 unless the user's role grants this capability.

    Apply after @login_required so the user is always a staff account.
    """
    if capability not in ALL_CAPABILITIES:
        raise KeyError(f"Unknown capability {capability!r}")

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not has_capability(role_for_user(request.user), capability):
                return HttpResponseForbidden(
                    "Access denied. Your role does not include this area."
                )
            return view_func(request, *args, **kwargs)
        wrapper.required_capability = capability
        return wrapper
    return decorator
