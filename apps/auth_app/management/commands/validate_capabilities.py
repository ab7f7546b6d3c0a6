"""Management command to validate the capability table and audit staff roles.

Usage:
    python manage.py validate_capabilities                    # Table consistency only
    python manage.py validate_capabilities --user nav@x.com   # One account's menu
    python manage.py validate_capabilities --all-users        # Audit every active account
"""
from django.core.management.base import BaseCommand, CommandError

from apps.auth_app.permissions import (
    ALL_CAPABILITIES,
    ROLE_CAPABILITIES,
    ROLE_ORDER,
    navigation_menu,
    validate_capabilities,
)

ROLE_DISPLAY = {
    "navigator": "Navigator",
    "coordinator": "Coordinator",
    "admin": "Administrator",
}


class Command(BaseCommand):
    help = "Validate the role capability table and audit staff role assignments."

    def add_arguments(self, parser):
        parser.add_argument(
            "--user",
            type=str,
            help="Show the navigation menu for one staff email.",
        )
        parser.add_argument(
            "--all-users",
            action="store_true",
            help="Audit all active staff accounts and their roles.",
        )

    def handle(self, *args, **options):
        is_valid, errors = validate_capabilities()

        if is_valid:
            self.stdout.write(
                self.style.SUCCESS(
                    f"[OK] Capability table consistent: "
                    f"{len(ROLE_ORDER)} roles x {len(ALL_CAPABILITIES)} capabilities"
                )
            )
            for role in ROLE_ORDER:
                self.stdout.write(
                    f"  {ROLE_DISPLAY[role]:15s} {len(ROLE_CAPABILITIES[role])} capabilities"
                )

        if options.get("user"):
            self._show_user_menu(options["user"])

        if options.get("all_users"):
            errors.extend(self._audit_all_users())

        if errors:
            self.stdout.write("")
            for error in errors:
                self.stdout.write(self.style.ERROR(f"  - {error}"))
            raise CommandError(f"{len(errors)} issue(s) found.")

    def _show_user_menu(self, email):
        from apps.auth_app.models import StaffAccount

        account = StaffAccount.objects.filter(email__iexact=email).first()
        if account is None:
            raise CommandError(f"No staff account with email '{email}'.")

        self.stdout.write("")
        self.stdout.write(f"{account.full_name} <{account.email}> ({ROLE_DISPLAY.get(account.role, account.role)})")
        self.stdout.write("=" * 60)
        for key, label in navigation_menu(account.role):
            self.stdout.write(f"  {label:30s} ({key})")

    def _audit_all_users(self):
        from apps.auth_app.models import StaffAccount

        errors = []
        self.stdout.write("")
        self.stdout.write("Staff Role Audit")
        self.stdout.write("=" * 60)
        for account in StaffAccount.objects.filter(is_active=True):
            if account.role not in ROLE_CAPABILITIES:
                errors.append(f"{account.email}: unknown role '{account.role}'")
                continue
            self.stdout.write(
                f"  {account.email:35s} {ROLE_DISPLAY[account.role]:15s} "
                f"{len(ROLE_CAPABILITIES[account.role])} capabilities"
            )
        return errors
