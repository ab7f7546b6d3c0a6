"""Role capability table — the single source of truth for navigation access.

Every view and menu consults this table through has_capability(),
scope_navigation() or the @requires_capability decorator. Never branch on
role names anywhere else.

Capabilities grow strictly with role:

    navigator ⊂ coordinator ⊂ admin

A request without an authenticated staff session (demo mode) gets every
capability. An unrecognised role string gets the navigator set.
"""

# Menu order. Keys are the capability names used by @requires_capability.
CAPABILITY_LABELS = {
    "overview-dashboard": "Dashboard",
    "client-records": "Client Management",
    "activity-log": "Health Navigation",
    "workforce-tracking": "Workforce Tracking",
    "unified-report": "Unified Reporting",
    "program-report": "Program Reporting",
    "local-insights": "Local Demographic Insights",
    "practice-directory": "Primary Care/GP Engagement",
    "resource-library": "Program Resources",
    "ai-insights": "AI Insights",
    "user-administration": "User Management",
    "staff-performance": "Staff Performance",
}

ALL_CAPABILITIES = frozenset(CAPABILITY_LABELS)

NAVIGATOR_CAPABILITIES = frozenset({
    "client-records",
    "activity-log",
    "local-insights",
    "practice-directory",
    "resource-library",
})

COORDINATOR_CAPABILITIES = NAVIGATOR_CAPABILITIES | frozenset({
    "overview-dashboard",
    "program-report",
    "workforce-tracking",
    "ai-insights",
})

ADMIN_CAPABILITIES = ALL_CAPABILITIES

ROLE_CAPABILITIES = {
    "navigator": NAVIGATOR_CAPABILITIES,
    "coordinator": COORDINATOR_CAPABILITIES,
    "admin": ADMIN_CAPABILITIES,
}

# Role order, least to most access.
ROLE_ORDER = ("navigator", "coordinator", "admin")

# Roles whose activity scope is the whole collection.
FULL_ACTIVITY_ACCESS_ROLES = frozenset({"admin", "coordinator"})


def scope_navigation(role):
    """Return the frozenset of capabilities for a role.

    role=None means no staff session (demo mode) and yields everything.
    """
    if role is None:
        return ALL_CAPABILITIES
    return ROLE_CAPABILITIES.get(role, NAVIGATOR_CAPABILITIES)


def has_capability(role, capability):
    if capability not in ALL_CAPABILITIES:
        raise KeyError(f"Unknown capability {capability!r}")
    return capability in scope_navigation(role)


def navigation_menu(role):
    """Return [(key, label), ...] in menu order for the role."""
    allowed = scope_navigation(role)
    return [(key, label) for key, label in CAPABILITY_LABELS.items() if key in allowed]


def role_for_user(user):
    """Map a request user to the role the table is keyed on (None = demo)."""
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "role", None) or "navigator"


def validate_capabilities():
    """Check the table's internal consistency.

    Returns:
        (is_valid, errors) where errors is a list of human-readable strings.
    """
    errors = []

    for role in ROLE_ORDER:
        if role not in ROLE_CAPABILITIES:
            errors.append(f"Role '{role}' missing from ROLE_CAPABILITIES")

    for role, capabilities in ROLE_CAPABILITIES.items():
        unknown = capabilities - ALL_CAPABILITIES
        if unknown:
            errors.append(f"Role '{role}' grants unknown capabilities: {sorted(unknown)}")

    for lower, higher in zip(ROLE_ORDER, ROLE_ORDER[1:]):
        missing = ROLE_CAPABILITIES.get(lower, frozenset()) - ROLE_CAPABILITIES.get(higher, frozenset())
        if missing:
            errors.append(
                f"Role '{higher}' lacks capabilities granted to '{lower}': {sorted(missing)}"
            )

    if ROLE_CAPABILITIES.get("admin") != ALL_CAPABILITIES:
        errors.append("Role 'admin' must hold every capability")

    return (not errors, errors)


def sees_all_activities(role):
    """True for full-access roles and for demo mode (role=None)."""
    return role is None or role in FULL_ACTIVITY_ACCESS_ROLES
