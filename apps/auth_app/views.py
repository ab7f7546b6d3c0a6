"""Authentication views: local email/password login and the navigation menu."""
import logging

from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.core.cache import cache
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST
from django_ratelimit.decorators import ratelimit

from multinav.ai import is_ai_available

from .forms import LoginForm
from .models import StaffAccount
from .permissions import navigation_menu, role_for_user

logger = logging.getLogger(__name__)

# Account lockout settings
LOCKOUT_THRESHOLD = 5  # Failed attempts before lockout
FAILED_ATTEMPT_WINDOW = 900  # Track attempts for 15 minutes


def _get_client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def _get_lockout_key(ip):
    return f"login_attempts:{ip}"


def _is_locked_out(ip):
    return cache.get(_get_lockout_key(ip), 0) >= LOCKOUT_THRESHOLD


def _record_failed_attempt(ip):
    key = _get_lockout_key(ip)
    attempts = cache.get(key, 0) + 1
    cache.set(key, attempts, FAILED_ATTEMPT_WINDOW)
    return attempts


def _session_payload(user):
    role = role_for_user(user)
    return {
        "email": user.email,
        "full_name": user.full_name,
        "role": role,
        "ai_available": is_ai_available(),
        "navigation": [
            {"key": key, "label": label} for key, label in navigation_menu(role)
        ],
    }


@require_POST
@ratelimit(key="ip", rate="5/m", method="POST", block=True)
def login_view(request):
    """Email/password login with rate limiting and IP lockout."""
    client_ip = _get_client_ip(request)
    if _is_locked_out(client_ip):
        return JsonResponse(
            {"error": "Too many failed login attempts. Please try again in 15 minutes."},
            status=429,
        )

    form = LoginForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"errors": form.errors.get_json_data()}, status=400)

    email = form.cleaned_data["email"].strip().lower()
    account = StaffAccount.objects.filter(email=email, is_active=True).first()
    if account is None or not account.check_password(form.cleaned_data["password"]):
        attempts = _record_failed_attempt(client_ip)
        logger.warning("Failed staff login from %s (attempt %d)", client_ip, attempts)
        return JsonResponse({"error": "Invalid email or password."}, status=401)

    cache.delete(_get_lockout_key(client_ip))
    login(request, account)
    account.last_login_at = timezone.now()
    account.save(update_fields=["last_login_at"])
    return JsonResponse(_session_payload(account))


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({"ok": True})


@login_required
@require_GET
def navigation_view(request):
    """The signed-in account's role and permitted menu entries."""
    return JsonResponse(_session_payload(request.user))
