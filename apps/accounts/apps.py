"""Django app configuration for accounts app."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Configuration for member profiles and invitations."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.accounts"
    verbose_name = "メンバー"

    def ready(self):
        """Register the profile-on-signup signal handler."""
        from . import signals  # noqa: F401
