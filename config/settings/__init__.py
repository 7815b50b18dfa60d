"""
Django settings package for Kinmu.

Settings are split into:
- base.py: Common settings shared across all environments
- development.py: Development-specific settings (DEBUG=True)
- production.py: Production-hardened settings
- test.py: Fast settings for the pytest suite

Usage:
    Set DJANGO_SETTINGS_MODULE environment variable to select the configuration:
    - config.settings.development (default for manage.py)
    - config.settings.production
    - config.settings.test
"""
