"""URL configuration for member management and invitation sign-in."""

from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    path("members/", views.members_view, name="members"),
    path("login/link/<str:token>/", views.sign_in_with_link, name="sign_in_with_link"),
]
