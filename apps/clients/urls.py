from django.urls import path

from . import views

app_name = "clients"

urlpatterns = [
    path("export.csv", views.client_export_csv, name="client_export_csv"),
]
