"""Tests for activity visibility and edit rights."""
from datetime import date
from types import SimpleNamespace

import pytest
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase

from apps.activities.access import (
    can_edit_activity,
    can_view_activity,
    has_authorship,
    is_authored_by,
    matches_staff_identity,
    scope_activities,
)
from apps.activities.models import Activity
from apps.auth_app.models import StaffAccount


def _activity(pk, created_by="", created_by_name="", **kwargs):
    return Activity(
        id=pk, client_id="C000001", date=kwargs.pop("date", date(2024, 5, 20)),
        created_by=created_by, created_by_name=created_by_name, **kwargs
    )


def _staff(email, role, full_name=""):
    return StaffAccount(email=email, role=role, full_name=full_name)


class IdentityMatchTest(SimpleTestCase):

    def test_email_match_is_case_insensitive(self):
        activity = _activity("A1", created_by="Nav@X.com")
        self.assertTrue(matches_staff_identity(activity, "nav@x.com", "Someone Else"))

    def test_name_match(self):
        activity = _activity("A1", created_by="old@x.com", created_by_name="Nadia Nav")
        self.assertTrue(matches_staff_identity(activity, "nav@x.com", "Nadia Nav"))

    def test_unattributed_matches_everyone(self):
        activity = _activity("A1")
        self.assertFalse(has_authorship(activity))
        self.assertTrue(matches_staff_identity(activity, "nav@x.com", "Nadia Nav"))

    def test_other_author_does_not_match(self):
        activity = _activity("A1", created_by="coord@x.com", created_by_name="Cora Coord")
        self.assertFalse(matches_staff_identity(activity, "nav@x.com", "Nadia Nav"))

    def test_blank_actor_name_never_matches_blank_author_name(self):
        activity = _activity("A1", created_by="coord@x.com")
        self.assertFalse(is_authored_by(activity, "nav@x.com", ""))

    def test_missing_fields_do_not_raise(self):
        bare = SimpleNamespace(id="A9")
        self.assertFalse(has_authorship(bare))
        self.assertTrue(matches_staff_identity(bare, "nav@x.com"))


class ScopeActivitiesTest(SimpleTestCase):

    def setUp(self):
        self.activities = [
            _activity("A1", created_by="nav@x.com", date=date(2024, 5, 20)),
            _activity("A2", created_by="coord@x.com", date=date(2024, 6, 1)),
        ]

    def test_navigator_sees_only_own_record(self):
        actor = _staff("nav@x.com", "navigator")
        self.assertEqual([a.id for a in scope_activities(self.activities, actor)], ["A1"])

    def test_coordinator_and_admin_see_everything(self):
        for role in ("coordinator", "admin"):
            actor = _staff(f"{role}@x.com", role)
            self.assertEqual(len(scope_activities(self.activities, actor)), 2)

    def test_demo_mode_sees_everything(self):
        self.assertEqual(len(scope_activities(self.activities, None)), 2)
        self.assertEqual(len(scope_activities(self.activities, AnonymousUser())), 2)

    def test_unknown_role_is_scoped_like_navigator(self):
        actor = _staff("nav@x.com", "volunteer")
        self.assertEqual([a.id for a in scope_activities(self.activities, actor)], ["A1"])

    def test_legacy_rows_visible_to_navigators(self):
        activities = self.activities + [_activity("A3")]
        actor = _staff("other@x.com", "navigator")
        self.assertEqual([a.id for a in scope_activities(activities, actor)], ["A3"])

    def test_preserves_input_order(self):
        activities = [_activity("A3"), _activity("A1", created_by="nav@x.com"), _activity("A4")]
        actor = _staff("nav@x.com", "navigator")
        self.assertEqual([a.id for a in scope_activities(activities, actor)], ["A3", "A1", "A4"])


@pytest.mark.parametrize("created_by,created_by_name", [
    ("coord@x.com", ""),
    ("", "Cora Coord"),
    ("coord@x.com", "Cora Coord"),
    ("NAV2@x.com", "Other Nav"),
])
def test_navigator_never_sees_another_identity(created_by, created_by_name):
    actor = _staff("nav@x.com", "navigator", full_name="Nadia Nav")
    activity = _activity("A1", created_by=created_by, created_by_name=created_by_name)
    assert scope_activities([activity], actor) == []
    assert not can_view_activity(activity, actor)


class EditRightsTest(SimpleTestCase):

    def test_navigator_can_edit_own(self):
        actor = _staff("nav@x.com", "navigator")
        self.assertTrue(can_edit_activity(_activity("A1", created_by="nav@x.com"), actor))

    def test_navigator_can_edit_unattributed(self):
        actor = _staff("nav@x.com", "navigator")
        self.assertTrue(can_edit_activity(_activity("A1"), actor))

    def test_navigator_cannot_edit_others(self):
        actor = _staff("nav@x.com", "navigator")
        self.assertFalse(can_edit_activity(_activity("A1", created_by="coord@x.com"), actor))

    def test_coordinator_can_edit_anything(self):
        actor = _staff("coord@x.com", "coordinator")
        self.assertTrue(can_edit_activity(_activity("A1", created_by="nav@x.com"), actor))
