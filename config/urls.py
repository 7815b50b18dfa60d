"""
URL configuration for the Kinmu project.

    /schedule/   weekly schedule and report submission (members)
    /reports/    monthly work-hour report (admins)
    /members/    member management (admins)
    /login/...   session login, logout and invitation links
"""

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),
    # Authentication
    path("", include("django.contrib.auth.urls")),
    # Member management and invitation sign-in
    path("", include("apps.accounts.urls", namespace="accounts")),
    # Main application
    path("", RedirectView.as_view(pattern_name="scheduling:schedule"), name="home"),
    path("schedule/", include("apps.scheduling.urls", namespace="scheduling")),
    path("reports/", include("apps.reports.urls", namespace="reports")),
]
