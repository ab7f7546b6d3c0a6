"""Staff account model — the custom user for every staff login."""
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils.translation import gettext_lazy as _


class StaffAccountManager(BaseUserManager):
    """Manager for StaffAccount. Emails are stored lower-cased."""

    use_in_migrations = True

    def get_by_natural_key(self, email):
        return self.get(email__iexact=email)

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required.")
        account = self.model(email=self.normalize_email(email).lower(), **extra_fields)
        if password:
            account.set_password(password)
        else:
            account.set_unusable_password()
        account.save(using=self._db)
        return account

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", "admin")
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


class StaffAccount(AbstractBaseUser, PermissionsMixin):
    """
    A program staff member.

    Roles:
        admin       → everything, including user administration and staff performance
        coordinator → navigator capabilities plus dashboards, program reports,
                      workforce tracking and AI insights; sees every activity
        navigator   → client records and their own activity log

    Role is the only input to activity visibility. assigned_locations is
    display metadata and does not restrict what a navigator sees.
    """

    ROLE_CHOICES = [
        ("admin", _("Administrator")),
        ("coordinator", _("Coordinator")),
        ("navigator", _("Navigator")),
    ]

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="navigator")
    assigned_locations = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False, help_text="Django admin access (rarely used).")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    objects = StaffAccountManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        app_label = "auth_app"
        db_table = "staff_accounts"
        ordering = ["created_at", "id"]

    def __str__(self):
        return self.full_name or self.email

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)

    def get_full_name(self):
        return self.full_name or self.email

    def get_short_name(self):
        return self.full_name.split(" ")[0] if self.full_name else self.email

    @property
    def is_admin(self):
        return self.role == "admin"
