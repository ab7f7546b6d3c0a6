from django.apps import AppConfig


class WorkforceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.workforce"
    label = "workforce"
    verbose_name = "Workforce Tracking"
