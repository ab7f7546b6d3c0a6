from django.urls import path

from . import views

app_name = "reports"

urlpatterns = [
    path("dashboard/", views.dashboard_view, name="dashboard"),
    path("program/", views.program_report_view, name="program_report"),
    path("unified/", views.unified_report_view, name="unified_report"),
    path("staff-performance/", views.staff_performance_view, name="staff_performance"),
    path("staff-performance/export.xlsx", views.staff_performance_export_view, name="staff_performance_export"),
    path("insights/", views.insights_view, name="insights"),
]
