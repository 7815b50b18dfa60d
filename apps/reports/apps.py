"""Django app configuration for reports app."""

from django.apps import AppConfig


class ReportsConfig(AppConfig):
    """Monthly work-hour reports; reads scheduling models, defines none."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.reports"
    verbose_name = "実績管理"
