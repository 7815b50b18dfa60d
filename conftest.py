"""
Pytest configuration and shared fixtures for the Kinmu project.

This module provides reusable fixtures for testing models and views.
Fixtures are designed to work with pytest-django.
"""

import pytest
from datetime import datetime, timedelta

from django.contrib.auth import get_user_model
from django.test import Client
from django.utils import timezone


User = get_user_model()


# =============================================================================
# USER FIXTURES
# =============================================================================


@pytest.fixture
def user(db):
    """Create and return a regular member (profile created by signal)."""
    return User.objects.create_user(
        username="testuser",
        password="testpass123",
        email="test@example.com",
        first_name="Taro",
        last_name="Yamada",
    )


@pytest.fixture
def admin_user(db):
    """Create and return a superuser; its profile carries the admin flag."""
    return User.objects.create_superuser(
        username="admin",
        password="adminpass123",
        email="admin@example.com",
    )


@pytest.fixture
def another_user(db):
    """Create and return a second member."""
    return User.objects.create_user(
        username="another",
        password="testpass123",
        email="another@example.com",
    )


# =============================================================================
# CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def client():
    """Provide a Django test client."""
    return Client()


@pytest.fixture
def authenticated_client(client, user):
    """Provide a Django test client logged in as the regular member."""
    client.force_login(user)
    return client


@pytest.fixture
def admin_member_client(client, admin_user):
    """Provide a Django test client logged in as the admin member."""
    client.force_login(admin_user)
    return client


# =============================================================================
# MODEL FIXTURES
# =============================================================================


@pytest.fixture
def ended_schedule(db, user):
    """A schedule of the regular member that ended an hour ago."""
    from apps.scheduling.models import Schedule

    end = timezone.now() - timedelta(hours=1)
    return Schedule.objects.create(
        owner=user.profile,
        start_time=end - timedelta(hours=8),
        end_time=end,
        location="本社",
        description="受付業務",
    )


@pytest.fixture
def upcoming_schedule(db, user):
    """A schedule of the regular member that has not started yet."""
    from apps.scheduling.models import Schedule

    start = timezone.now() + timedelta(hours=1)
    return Schedule.objects.create(
        owner=user.profile,
        start_time=start,
        end_time=start + timedelta(hours=8),
        location="本社",
        description="受付業務",
    )


@pytest.fixture
def report(db, ended_schedule):
    """A report filed against ``ended_schedule``."""
    from apps.scheduling.models import Report

    return Report.objects.create(
        schedule=ended_schedule,
        actual_start_time=ended_schedule.start_time,
        actual_end_time=ended_schedule.end_time,
        break_time=60,
        actual_description="受付業務",
        reflection="問題なし",
    )


# =============================================================================
# UTILITY FIXTURES
# =============================================================================


@pytest.fixture
def local_datetime():
    """Build aware datetimes in the project time zone."""

    def build(*args):
        return timezone.make_aware(datetime(*args))

    return build


@pytest.fixture
def freeze_time():
    """
    Fixture that provides a context manager for freezing time.

    Usage:
        def test_something(freeze_time):
            with freeze_time(timezone.now()):
                # Time is frozen here
                pass
    """
    from unittest.mock import patch

    class TimeFreezer:
        def __call__(self, frozen_time):
            return patch("django.utils.timezone.now", return_value=frozen_time)

    return TimeFreezer()
