"""Root URL configuration."""
from django.urls import include, path

from multinav.error_views import page_not_found_view, permission_denied_view

# Custom error handlers
handler403 = permission_denied_view
handler404 = page_not_found_view

urlpatterns = [
    path("auth/", include("apps.auth_app.urls")),
    path("clients/", include("apps.clients.urls")),
    path("activities/", include("apps.activities.urls")),
    path("reports/", include("apps.reports.urls")),
]
