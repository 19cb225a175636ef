"""
URL configuration for the frontend app.

All URLs are mounted under /app/ in boot/urls.py.
"""

from django.urls import path

from frontend.views import auth, profile

app_name = "frontend"

urlpatterns = [
    # Authentication
    path("login/", auth.login_view, name="login"),
    path("logout/", auth.logout_view, name="logout"),
    # Profile
    path("profile/", profile.profile_view, name="profile"),
    path("profile/delete/", profile.profile_delete_view, name="profile_delete"),
]
