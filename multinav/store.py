"""Entity store adapter.

Reads return plain lists of model instances (the snapshots every report is
computed from). Writes validate through the same forms the staff screens
use and return the persisted record.

    StorageError     the database failed, or the id does not exist
    ValidationError  the submitted data failed form validation
    PermissionDenied the actor may not change this activity
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.activities.access import can_edit_activity
from apps.activities.forms import ActivityForm
from apps.activities.models import AUTHORSHIP_FIELDS, Activity
from apps.auth_app.forms import StaffAccountForm
from apps.auth_app.models import StaffAccount
from apps.auth_app.permissions import role_for_user
from apps.clients.forms import ClientForm
from apps.clients.models import Client
from apps.workforce.models import PARTITIONS, WorkforceEntry, partition_workforce

logger = logging.getLogger(__name__)

CLIENT_FIELDS = (
    "full_name", "sex", "birth_date", "ethnicity", "country_of_birth", "languages",
    "referral_source", "referral_date", "address", "postcode", "region",
)

ACTIVITY_FIELDS = tuple(ActivityForm.base_fields)

STAFF_ACCOUNT_FIELDS = ("email", "full_name", "role", "assigned_locations", "is_active")

WORKFORCE_FIELDS = ("fte", "role", "ethnicity", "languages")


class StorageError(Exception):
    """The store could not complete a read or write."""


@dataclass
class ReportSnapshot:
    """The four raw collections a report run works from."""

    clients: list = field(default_factory=list)
    activities: list = field(default_factory=list)
    workforce: dict = field(default_factory=lambda: {key: [] for key in PARTITIONS})
    staff_accounts: list = field(default_factory=list)

    @property
    def clients_by_id(self):
        return {client.pk: client for client in self.clients}


@contextmanager
def _storage_errors(action):
    try:
        yield
    except DatabaseError as exc:
        logger.exception("Store failed to %s", action)
        raise StorageError(f"Could not {action}.") from exc


def _get(model, pk, label):
    with _storage_errors(f"load {label}"):
        try:
            return model.objects.get(pk=pk)
        except model.DoesNotExist:
            raise StorageError(f"{label.capitalize()} {pk} does not exist.") from None


def _validated(form):
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())
    return form.cleaned_data


def _current_values(instance, field_names):
    return {name: getattr(instance, name) for name in field_names}


# ------------------------------------------------------------------
# Reads
# ------------------------------------------------------------------

def fetch_clients():
    with _storage_errors("load clients"):
        return list(Client.objects.all())


def fetch_activities():
    with _storage_errors("load activities"):
        return list(Activity.objects.all())


def fetch_workforce():
    """Workforce entries as {"north": [...], "south": [...]}."""
    with _storage_errors("load workforce"):
        return partition_workforce(WorkforceEntry.objects.all())


def fetch_staff_accounts():
    """Staff accounts in roster order (oldest first)."""
    with _storage_errors("load staff accounts"):
        return list(StaffAccount.objects.all())


def fetch_snapshot():
    """Load all four collections for one report run.

    The ORM is synchronous, so the reads run one after another on the
    request thread.
    """
    return ReportSnapshot(
        clients=fetch_clients(),
        activities=fetch_activities(),
        workforce=fetch_workforce(),
        staff_accounts=fetch_staff_accounts(),
    )


# ------------------------------------------------------------------
# Clients
# ------------------------------------------------------------------

def _apply_client(client, cleaned):
    for name in CLIENT_FIELDS:
        setattr(client, name, cleaned[name])
    if cleaned.get("portal_password"):
        client.set_portal_password(cleaned["portal_password"])


def create_client(data, as_of=None):
    cleaned = _validated(ClientForm(data, as_of=as_of))
    client = Client()
    _apply_client(client, cleaned)
    with _storage_errors("create client"):
        client.save()
    logger.info("Created client %s", client.pk)
    return client


def update_client(client_id, data, as_of=None):
    """Apply a partial update; fields missing from data keep their values."""
    client = _get(Client, client_id, "client")
    merged = {**_current_values(client, CLIENT_FIELDS), **data}
    cleaned = _validated(ClientForm(merged, as_of=as_of))
    _apply_client(client, cleaned)
    with _storage_errors("update client"):
        client.save()
    return client


def delete_client(client_id):
    """Hard delete. Activities that reference the client are left in place."""
    client = _get(Client, client_id, "client")
    with _storage_errors("delete client"):
        client.delete()
    logger.info("Deleted client %s", client_id)


# ------------------------------------------------------------------
# Activities
# ------------------------------------------------------------------

def create_activity(author, data):
    """Record an activity, stamping authorship from the signed-in author.

    Authorship keys in data are ignored. Without an authenticated author
    (demo mode) the activity is stored unattributed.
    """
    cleaned = _validated(ActivityForm(data))
    activity = Activity(**cleaned)
    if role_for_user(author) is not None:
        activity.created_by = author.email.lower()
        activity.created_by_name = author.full_name
        activity.created_by_role = author.role
    activity.created_at = timezone.now()
    with _storage_errors("create activity"):
        activity.save()
    logger.info("Created activity %s", activity.pk)
    return activity


def update_activity(actor, activity_id, data):
    """Apply a partial update. Authorship is never changed."""
    activity = _get(Activity, activity_id, "activity")
    if not can_edit_activity(activity, actor):
        raise PermissionDenied("You cannot edit this activity.")
    changes = {k: v for k, v in data.items() if k not in AUTHORSHIP_FIELDS}
    merged = {**_current_values(activity, ACTIVITY_FIELDS), **changes}
    cleaned = _validated(ActivityForm(merged))
    for name, value in cleaned.items():
        setattr(activity, name, value)
    with _storage_errors("update activity"):
        activity.save(update_fields=list(cleaned))
    return activity


def delete_activity(actor, activity_id):
    activity = _get(Activity, activity_id, "activity")
    if not can_edit_activity(activity, actor):
        raise PermissionDenied("You cannot delete this activity.")
    with _storage_errors("delete activity"):
        activity.delete()
    logger.info("Deleted activity %s", activity_id)


# ------------------------------------------------------------------
# Workforce
# ------------------------------------------------------------------

def replace_workforce(partitioned):
    """Replace every workforce entry with the given {"north": [...], "south": [...]} rows."""
    unknown = set(partitioned) - set(PARTITIONS)
    if unknown:
        raise ValidationError(
            "Unknown workforce partition(s): %(names)s",
            params={"names": ", ".join(sorted(unknown))},
        )

    entries = []
    for partition in PARTITIONS:
        for row in partitioned.get(partition, []):
            entry = WorkforceEntry(
                partition=partition,
                **{name: row[name] for name in WORKFORCE_FIELDS if name in row},
            )
            entry.full_clean(exclude=["created_at"])
            entries.append(entry)

    with _storage_errors("replace workforce"):
        with transaction.atomic():
            WorkforceEntry.objects.all().delete()
            WorkforceEntry.objects.bulk_create(entries)
    return fetch_workforce()


# ------------------------------------------------------------------
# Staff accounts
# ------------------------------------------------------------------

def create_staff_account(data):
    cleaned = _validated(StaffAccountForm({"is_active": True, **data}))
    with _storage_errors("create staff account"):
        account = StaffAccount.objects.create_user(
            cleaned["email"],
            cleaned["password"],
            **{name: cleaned[name] for name in STAFF_ACCOUNT_FIELDS if name != "email"},
        )
    logger.info("Created staff account %s (%s)", account.pk, account.role)
    return account


def update_staff_account(account_id, data):
    account = _get(StaffAccount, account_id, "staff account")
    merged = {**_current_values(account, STAFF_ACCOUNT_FIELDS), **data}
    cleaned = _validated(StaffAccountForm(merged, instance=account))
    for name in STAFF_ACCOUNT_FIELDS:
        setattr(account, name, cleaned[name])
    if cleaned.get("password"):
        account.set_password(cleaned["password"])
    with _storage_errors("update staff account"):
        account.save()
    return account


def delete_staff_account(account_id):
    """Remove an account. Activities keep the authorship they were stamped with."""
    account = _get(StaffAccount, account_id, "staff account")
    with _storage_errors("delete staff account"):
        account.delete()
    logger.info("Deleted staff account %s", account_id)
