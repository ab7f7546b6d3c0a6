"""Base settings shared by every environment.

Environment-specific modules (development.py, test.py) set their defaults in
os.environ and then star-import this module.
"""
import os
from pathlib import Path

import dj_database_url
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def require_env(name):
    """Return an environment variable or fail loudly at startup."""
    value = os.environ.get(name)
    if not value:
        raise ImproperlyConfigured(
            f"Required environment variable {name} is not set."
        )
    return value


SECRET_KEY = require_env("SECRET_KEY")
DEBUG = False
ALLOWED_HOSTS = [h.strip() for h in os.environ.get("ALLOWED_HOSTS", "").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "apps.auth_app",
    "apps.clients",
    "apps.activities",
    "apps.workforce",
    "apps.reports",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "multinav.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
            ],
        },
    },
]

DATABASES = {
    "default": dj_database_url.parse(require_env("DATABASE_URL"), conn_max_age=600),
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
AUTH_USER_MODEL = "auth_app.StaffAccount"
LOGIN_URL = "/auth/login/"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
]

LANGUAGE_CODE = "en-au"
TIME_ZONE = "Australia/Perth"
USE_I18N = True
USE_TZ = True

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True

# PII encryption (Fernet). Comma-separated keys rotate: first key encrypts.
FIELD_ENCRYPTION_KEY = require_env("FIELD_ENCRYPTION_KEY")

# Narrative insights provider. OpenRouter by default; INSIGHTS_API_BASE points
# at any other OpenAI-compatible endpoint (e.g. a local Ollama).
OPENROUTER_API_KEY = os.environ.get("OPENROUTER_API_KEY", "")
OPENROUTER_MODEL = os.environ.get("OPENROUTER_MODEL", "anthropic/claude-sonnet-4-20250514")
OPENROUTER_SITE_URL = os.environ.get("OPENROUTER_SITE_URL", "")
INSIGHTS_API_BASE = os.environ.get("INSIGHTS_API_BASE", "")
INSIGHTS_API_KEY = os.environ.get("INSIGHTS_API_KEY", "")
INSIGHTS_MODEL = os.environ.get("INSIGHTS_MODEL", "llama3")
NARRATIVE_TIMEOUT_SECONDS = int(os.environ.get("NARRATIVE_TIMEOUT_SECONDS", "30"))
NARRATIVE_TOP_K = int(os.environ.get("NARRATIVE_TOP_K", "5"))

# Pre-authorship activities are credited to this account in staff rollups.
# Empty = the first admin account on the roster.
LEGACY_ACTIVITY_OWNER_EMAIL = os.environ.get("LEGACY_ACTIVITY_OWNER_EMAIL", "")

RATELIMIT_ENABLE = True

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.environ.get("LOG_LEVEL", "INFO"),
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "multinav": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
