"""Test settings — SQLite for fast tests without PostgreSQL.

Local dev: uses in-memory SQLite by default (fast, no cleanup needed).
CI: set DATABASE_URL to a file-based SQLite (e.g. sqlite:///ci-test.db)
    so xdist workers share the schema across process boundaries.
"""
import os

import dj_database_url

# Provide test defaults BEFORE importing base (which calls require_env).
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
# Test-only key, never used in development or production
os.environ.setdefault("FIELD_ENCRYPTION_KEY", "TUVSTlZ6a09VRWlMU0FzZjhOWlNhTFZfVFIxaURFbXM=")

from .base import *  # noqa: F401, F403

DEBUG = True
ALLOWED_HOSTS = ["*"]
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

DATABASES = {
    "default": dj_database_url.parse(
        os.environ["DATABASE_URL"],
        conn_max_age=0,
    ),
}

# Use fast password hasher for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable rate limiting in tests (prevents 403s from cumulative POST counts)
RATELIMIT_ENABLE = False

# No real provider in tests; tests patch the transport or set a key explicitly.
OPENROUTER_API_KEY = ""
INSIGHTS_API_BASE = ""
LEGACY_ACTIVITY_OWNER_EMAIL = ""
