from django.urls import path

from . import views

app_name = "activities"

urlpatterns = [
    path("", views.activity_list, name="activity_list"),
    path("<str:activity_id>/", views.activity_update, name="activity_update"),
    path("<str:activity_id>/delete/", views.activity_delete, name="activity_delete"),
]
