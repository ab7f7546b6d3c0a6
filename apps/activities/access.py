"""Activity visibility and edit rights.

Every view, filter and rollup that needs to know "whose activity is this"
imports from here instead of comparing authorship strings itself.

A navigator sees an activity when any of these hold:

    created_by == their email      (case-insensitive, the canonical match)
    created_by_name == their name  (records written before emails were stamped)
    the activity has no authorship (legacy rows, visible to everyone)

Admins, coordinators and demo sessions (no authenticated actor) see every
activity.
"""
from apps.auth_app.permissions import role_for_user, sees_all_activities


def _clean(value):
    return (value or "").strip()


def has_authorship(activity):
    """False for legacy rows with neither created_by nor created_by_name."""
    return bool(
        _clean(getattr(activity, "created_by", ""))
        or _clean(getattr(activity, "created_by_name", ""))
    )


def is_authored_by(activity, email="", full_name=""):
    """Strict authorship match on email or display name. Unattributed rows never match."""
    created_by = _clean(getattr(activity, "created_by", "")).lower()
    if created_by and created_by == _clean(email).lower():
        return True
    created_by_name = _clean(getattr(activity, "created_by_name", ""))
    if created_by_name and created_by_name == _clean(full_name):
        return True
    return False


def matches_staff_identity(activity, email="", full_name=""):
    """The three-way identity rule: email OR name OR no authorship at all."""
    if not has_authorship(activity):
        return True
    return is_authored_by(activity, email, full_name)


def _actor_identity(actor):
    return getattr(actor, "email", "") or "", getattr(actor, "full_name", "") or ""


def can_view_activity(activity, actor):
    if sees_all_activities(role_for_user(actor)):
        return True
    email, full_name = _actor_identity(actor)
    return matches_staff_identity(activity, email, full_name)


def scope_activities(activities, actor):
    """Return the activities the actor may read, in input order."""
    role = role_for_user(actor)
    if sees_all_activities(role):
        return list(activities)
    email, full_name = _actor_identity(actor)
    return [a for a in activities if matches_staff_identity(a, email, full_name)]


def can_edit_activity(activity, actor):
    """Edit and delete rights: visible, and full access, own record, or unattributed."""
    if not can_view_activity(activity, actor):
        return False
    if sees_all_activities(role_for_user(actor)):
        return True
    email, full_name = _actor_identity(actor)
    return is_authored_by(activity, email, full_name) or not has_authorship(activity)
