"""
Django settings used by the pytest suite.

Selected through ``DJANGO_SETTINGS_MODULE`` in pyproject.toml.
"""

from .base import *  # noqa: F401, F403

DEBUG = False

SECRET_KEY = "test-secret"

ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Templates reference static files that are never collected under test
STORAGES = {  # noqa: F405
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

LOGGING["loggers"]["apps"]["level"] = "WARNING"  # noqa: F405
