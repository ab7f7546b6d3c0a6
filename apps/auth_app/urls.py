from django.urls import path

from . import views

app_name = "auth_app"

urlpatterns = [
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),
    path("navigation/", views.navigation_view, name="navigation"),
]
