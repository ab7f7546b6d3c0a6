"""Django system checks for capability enforcement wiring.

These run automatically with every manage.py command (runserver, migrate, etc.).

Check IDs:
    multinav.E020 — Unknown capability key in @requires_capability (typo / deleted key)
    multinav.E021 — Capability table is internally inconsistent
    multinav.W021 — Capability not referenced by any @requires_capability (dead key)

Run checks manually:
    python manage.py check
"""
import re
from pathlib import Path

from django.conf import settings
from django.core.checks import Error, Warning, register

from apps.auth_app.permissions import ALL_CAPABILITIES, validate_capabilities

_REQUIRES_CAPABILITY_PATTERN = re.compile(
    r"""@requires_capability\(\s*["']([a-z\-]+)["']"""
)

# Capabilities served by UI surfaces outside this codebase (static pages).
_UNENFORCED_CAPABILITIES = {
    "local-insights",
    "practice-directory",
    "resource-library",
    "workforce-tracking",
    "user-administration",
}


def _scan_view_files():
    base_dir = Path(getattr(settings, "BASE_DIR", "."))
    apps_dir = base_dir / "apps"
    if not apps_dir.exists():
        return []
    return [p for p in apps_dir.rglob("*.py") if "views" in p.name]


def _referenced_capabilities():
    found = {}
    for py_file in _scan_view_files():
        try:
            content = py_file.read_text(encoding="utf-8")
        except OSError:
            continue
        for match in _REQUIRES_CAPABILITY_PATTERN.finditer(content):
            found.setdefault(match.group(1), py_file)
    return found


@register()
def check_capability_keys(app_configs, **kwargs):
    """E020 / W021: decorators must name real capabilities, and every
    enforced capability should be used by at least one view."""
    messages = []
    referenced = _referenced_capabilities()

    for key, py_file in sorted(referenced.items()):
        if key not in ALL_CAPABILITIES:
            messages.append(
                Error(
                    f"Unknown capability '{key}' in @requires_capability ({py_file.name}).",
                    hint="Add it to CAPABILITY_LABELS in apps/auth_app/permissions.py or fix the typo.",
                    id="multinav.E020",
                )
            )

    if referenced:
        for key in sorted(ALL_CAPABILITIES - set(referenced) - _UNENFORCED_CAPABILITIES):
            messages.append(
                Warning(
                    f"Capability '{key}' is not enforced by any view.",
                    id="multinav.W021",
                )
            )
    return messages


@register()
def check_capability_table(app_configs, **kwargs):
    """E021: the role → capability table must be nested and complete."""
    is_valid, errors = validate_capabilities()
    if is_valid:
        return []
    return [
        Error(f"Capability table: {message}", id="multinav.E021")
        for message in errors
    ]
