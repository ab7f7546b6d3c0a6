"""Tests for the entity store: reads, validated writes and authorship stamping."""
from datetime import date
from unittest.mock import patch

from cryptography.fernet import Fernet
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError
from django.test import TestCase, override_settings

from apps.activities.models import Activity
from apps.auth_app.models import StaffAccount
from apps.clients.models import Client
from multinav import store
from multinav.store import StorageError
import multinav.encryption as enc_module

TEST_KEY = Fernet.generate_key().decode()


def _client_data(**overrides):
    data = {
        "full_name": "Amina Yusuf",
        "sex": "Female",
        "birth_date": "1990-03-01",
        "ethnicity": "Somali",
        "country_of_birth": "Somalia",
        "languages": ["Somali", "English"],
        "referral_source": "GP",
        "referral_date": "2024-06-10",
        "address": "12 Beach Rd",
        "postcode": "6020",
        "region": "North",
    }
    data.update(overrides)
    return data


def _activity_data(client_id, **overrides):
    data = {
        "client_id": client_id,
        "date": "2024-06-03",
        "location": "Stirling",
        "navigation_assistance": ["Care Coordination"],
        "services_accessed": ["Dental"],
    }
    data.update(overrides)
    return data


@override_settings(FIELD_ENCRYPTION_KEY=TEST_KEY)
class ClientStoreTest(TestCase):

    def setUp(self):
        enc_module._fernet = None

    def tearDown(self):
        enc_module._fernet = None

    def test_create_encrypts_pii(self):
        client = store.create_client(_client_data(), as_of=date(2024, 7, 1))
        self.assertTrue(client.pk.startswith("C"))
        stored = Client.objects.get(pk=client.pk)
        self.assertNotIn(b"Amina", bytes(stored._full_name_encrypted))
        self.assertEqual(stored.full_name, "Amina Yusuf")
        self.assertEqual(stored.birth_date, date(1990, 3, 1))
        self.assertEqual(stored.address, "12 Beach Rd")
        self.assertEqual(stored.age_on(date(2024, 7, 1)), 34)

    def test_create_rejects_missing_region(self):
        with self.assertRaises(ValidationError) as ctx:
            store.create_client(_client_data(region=""))
        self.assertIn("region", ctx.exception.message_dict)

    def test_create_rejects_future_birth_date(self):
        with self.assertRaises(ValidationError):
            store.create_client(_client_data(birth_date="2030-01-01"), as_of=date(2024, 7, 1))

    def test_portal_password_is_hashed(self):
        client = store.create_client(_client_data(portal_password="long-enough-pw"))
        self.assertNotEqual(client.portal_password, "long-enough-pw")
        self.assertTrue(client.check_portal_password("long-enough-pw"))

    def test_partial_update_keeps_other_fields(self):
        client = store.create_client(_client_data())
        store.update_client(client.pk, {"ethnicity": "Eritrean"})
        stored = Client.objects.get(pk=client.pk)
        self.assertEqual(stored.ethnicity, "Eritrean")
        self.assertEqual(stored.full_name, "Amina Yusuf")
        self.assertEqual(stored.languages, ["Somali", "English"])

    def test_missing_client_is_a_storage_error(self):
        with self.assertRaises(StorageError):
            store.update_client("CNOPE00", {"ethnicity": "x"})
        with self.assertRaises(StorageError):
            store.delete_client("CNOPE00")

    def test_delete_leaves_activities(self):
        client = store.create_client(_client_data())
        Activity.objects.create(client_id=client.pk, date=date(2024, 6, 3))
        store.delete_client(client.pk)
        self.assertFalse(Client.objects.filter(pk=client.pk).exists())
        self.assertEqual(Activity.objects.filter(client_id=client.pk).count(), 1)

    def test_wrong_key_shows_decryption_error(self):
        client = store.create_client(_client_data())
        enc_module._fernet = None
        with override_settings(FIELD_ENCRYPTION_KEY=Fernet.generate_key().decode()):
            stored = Client.objects.get(pk=client.pk)
            self.assertEqual(stored.full_name, "[DECRYPTION ERROR]")
            self.assertIsNone(stored.birth_date)
        enc_module._fernet = None


@override_settings(FIELD_ENCRYPTION_KEY=TEST_KEY)
class ActivityStoreTest(TestCase):

    def setUp(self):
        enc_module._fernet = None
        self.nav = StaffAccount.objects.create_user(
            "Nav@X.com", "pw-123456", full_name="Nadia Nav", role="navigator",
        )
        self.other_nav = StaffAccount.objects.create_user(
            "nav2@x.com", "pw-123456", full_name="Omar Nav", role="navigator",
        )
        self.coordinator = StaffAccount.objects.create_user(
            "coord@x.com", "pw-123456", full_name="Cora Coord", role="coordinator",
        )

    def test_create_stamps_author(self):
        activity = store.create_activity(self.nav, _activity_data("C000001", created_by="forged@x.com"))
        self.assertEqual(activity.created_by, "nav@x.com")
        self.assertEqual(activity.created_by_name, "Nadia Nav")
        self.assertEqual(activity.created_by_role, "navigator")
        self.assertIsNotNone(activity.created_at)

    def test_demo_author_leaves_activity_unattributed(self):
        activity = store.create_activity(None, _activity_data("C000001"))
        self.assertEqual(activity.created_by, "")
        self.assertEqual(activity.created_by_name, "")

    def test_create_rejects_unknown_tag(self):
        with self.assertRaises(ValidationError):
            store.create_activity(self.nav, _activity_data("C000001", services_accessed=["Astrology"]))

    def test_elaboration_requires_other_tag(self):
        with self.assertRaises(ValidationError) as ctx:
            store.create_activity(self.nav, _activity_data("C000001", other_services="Podiatry"))
        self.assertIn("other_services", ctx.exception.message_dict)
        activity = store.create_activity(self.nav, _activity_data(
            "C000001", services_accessed=["Other Services"], other_services=" Podiatry ",
        ))
        self.assertEqual(activity.other_services, "Podiatry")

    def test_discharge_needs_date(self):
        with self.assertRaises(ValidationError):
            store.create_activity(self.nav, _activity_data("C000001", is_discharge=True))
        activity = store.create_activity(self.nav, _activity_data(
            "C000001", is_discharge=True, discharge_date="2024-06-03", discharge_reason="Goals met",
        ))
        self.assertTrue(activity.is_discharge)

    def test_tags_accept_semicolon_string(self):
        activity = store.create_activity(self.nav, _activity_data(
            "C000001", services_accessed="Dental; Mental Health; Dental",
        ))
        self.assertEqual(activity.services_accessed, ["Dental", "Mental Health"])

    def test_update_keeps_authorship(self):
        activity = store.create_activity(self.nav, _activity_data("C000001"))
        updated = store.update_activity(self.nav, activity.pk, {
            "location": "Swan", "created_by": "someone@x.com", "created_by_name": "Someone",
        })
        self.assertEqual(updated.location, "Swan")
        stored = Activity.objects.get(pk=activity.pk)
        self.assertEqual(stored.created_by, "nav@x.com")
        self.assertEqual(stored.created_by_name, "Nadia Nav")
        self.assertEqual(stored.services_accessed, ["Dental"])

    def test_navigator_cannot_touch_another_navigators_activity(self):
        activity = store.create_activity(self.other_nav, _activity_data("C000001"))
        with self.assertRaises(PermissionDenied):
            store.update_activity(self.nav, activity.pk, {"location": "Swan"})
        with self.assertRaises(PermissionDenied):
            store.delete_activity(self.nav, activity.pk)

    def test_coordinator_can_edit_any_activity(self):
        activity = store.create_activity(self.nav, _activity_data("C000001"))
        store.update_activity(self.coordinator, activity.pk, {"follow_up_actions": "Call Friday"})
        self.assertEqual(Activity.objects.get(pk=activity.pk).follow_up_actions, "Call Friday")
        store.delete_activity(self.coordinator, activity.pk)
        self.assertFalse(Activity.objects.filter(pk=activity.pk).exists())

    def test_database_failure_is_a_storage_error(self):
        with patch.object(Activity.objects, "all", side_effect=DatabaseError("disk full")):
            with self.assertRaises(StorageError):
                store.fetch_activities()


class WorkforceStoreTest(TestCase):

    def test_replace_is_wholesale(self):
        store.replace_workforce({"north": [{"fte": 1.0, "role": "Navigator"}]})
        result = store.replace_workforce({
            "north": [{"fte": 0.6, "role": "Navigator", "languages": ["Dari"]}],
            "south": [{"fte": 0.8, "role": "Coordinator"}],
        })
        self.assertEqual([e.fte for e in result["north"]], [0.6])
        self.assertEqual([e.role for e in result["south"]], ["Coordinator"])
        self.assertEqual(store.fetch_workforce()["north"][0].languages, ["Dari"])

    def test_unknown_partition_rejected(self):
        with self.assertRaises(ValidationError):
            store.replace_workforce({"east": []})

    def test_negative_fte_rejected_without_writing(self):
        store.replace_workforce({"north": [{"fte": 1.0}]})
        with self.assertRaises(ValidationError):
            store.replace_workforce({"north": [{"fte": -1}]})
        self.assertEqual([e.fte for e in store.fetch_workforce()["north"]], [1.0])


class StaffAccountStoreTest(TestCase):

    def test_create_and_update(self):
        account = store.create_staff_account({
            "email": "New@X.com", "full_name": "New Person", "role": "navigator",
            "assigned_locations": ["Swan"], "is_active": True, "password": "pw-123456",
        })
        self.assertEqual(account.email, "new@x.com")
        self.assertTrue(account.check_password("pw-123456"))

        updated = store.update_staff_account(account.pk, {"role": "coordinator"})
        self.assertEqual(updated.role, "coordinator")
        self.assertEqual(updated.assigned_locations, ["Swan"])
        self.assertTrue(StaffAccount.objects.get(pk=account.pk).check_password("pw-123456"))

    def test_duplicate_email_rejected(self):
        StaffAccount.objects.create_user("dup@x.com", "pw-123456", full_name="Dup")
        with self.assertRaises(ValidationError):
            store.create_staff_account({
                "email": "DUP@x.com", "full_name": "Dup Again", "role": "navigator",
                "password": "pw-123456",
            })

    def test_password_required_on_create(self):
        with self.assertRaises(ValidationError):
            store.create_staff_account({"email": "a@x.com", "full_name": "A", "role": "admin"})

    def test_delete(self):
        account = StaffAccount.objects.create_user("gone@x.com", "pw-123456", full_name="Gone")
        store.delete_staff_account(account.pk)
        self.assertEqual(store.fetch_staff_accounts(), [])
