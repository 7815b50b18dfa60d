"""Django app configuration for scheduling app."""

from django.apps import AppConfig


class SchedulingConfig(AppConfig):
    """Configuration for planned schedules and work reports."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.scheduling"
    verbose_name = "予定表"
