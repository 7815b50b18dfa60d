"""
Django development settings for Kinmu.

These settings extend base.py with development-specific configuration.

Usage:
    export DJANGO_SETTINGS_MODULE=config.settings.development
    python manage.py runserver
"""

from .base import *  # noqa: F401, F403

# =============================================================================
# DEBUG CONFIGURATION
# =============================================================================

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "[::1]"]

INTERNAL_IPS = [
    "127.0.0.1",
    "localhost",
]


# =============================================================================
# EMAIL CONFIGURATION (Console backend for development)
# =============================================================================

# Invitation links are printed to the runserver console
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"


# =============================================================================
# STATIC FILES (Development - no compression)
# =============================================================================

STORAGES = {  # noqa: F405
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}


# =============================================================================
# LOGGING (More verbose in development)
# =============================================================================

LOGGING["loggers"]["django"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
