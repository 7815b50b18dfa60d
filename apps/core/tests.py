"""
Tests for the shared core helpers.

This module tests:
- The access control gate (resolve_access and the view decorators)
- Work duration arithmetic
- Template filters
"""

from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import PermissionDenied
from django.http import HttpResponse
from django.test import RequestFactory, TestCase

from apps.accounts.models import Profile

from .access import Decision, admin_required, member_required, resolve_access
from .durations import split_duration, work_minutes
from .templatetags.kinmu import day_label, duration

User = get_user_model()


def create_user(username="member", password="testpass123", **kwargs):
    """Create and return a test user."""
    return User.objects.create_user(username=username, password=password, **kwargs)


def ok_view(request):
    return HttpResponse(f"profile={request.profile.pk}")


# =============================================================================
# ACCESS GATE TESTS
# =============================================================================


class ResolveAccessTests(TestCase):
    """Tests for resolve_access outcomes."""

    def setUp(self):
        self.factory = RequestFactory()

    def _request(self, user):
        request = self.factory.get("/reports/")
        request.user = user
        return request

    def test_anonymous_request_is_redirected(self):
        outcome = resolve_access(self._request(AnonymousUser()))

        self.assertEqual(outcome.decision, Decision.REDIRECT)
        self.assertFalse(outcome.allowed)

    def test_member_is_allowed_on_member_views(self):
        user = create_user()

        outcome = resolve_access(self._request(user))

        self.assertTrue(outcome.allowed)
        self.assertEqual(outcome.profile, user.profile)

    def test_member_is_denied_on_admin_views(self):
        user = create_user()

        outcome = resolve_access(self._request(user), admin=True)

        self.assertEqual(outcome.decision, Decision.DENY)
        self.assertEqual(outcome.profile, user.profile)

    def test_admin_is_allowed_on_admin_views(self):
        user = create_user()
        Profile.objects.filter(user=user).update(is_admin=True)

        outcome = resolve_access(self._request(user), admin=True)

        self.assertTrue(outcome.allowed)

    def test_missing_profile_is_denied(self):
        """A session without a profile is an error, not a redirect."""
        user = create_user()
        Profile.objects.filter(user=user).delete()

        outcome = resolve_access(self._request(user))

        self.assertEqual(outcome.decision, Decision.DENY)
        self.assertIsNone(outcome.profile)


class GuardDecoratorTests(TestCase):
    """Tests for member_required / admin_required."""

    def setUp(self):
        self.factory = RequestFactory()

    def test_member_required_redirects_anonymous_to_login(self):
        request = self.factory.get("/schedule/")
        request.user = AnonymousUser()

        response = member_required(ok_view)(request)

        self.assertEqual(response.status_code, 302)
        self.assertIn("/login/", response.url)
        self.assertIn("next=/schedule/", response.url)

    def test_admin_required_raises_permission_denied_for_member(self):
        request = self.factory.post("/members/", {"intent": "delete"})
        request.user = create_user()

        with self.assertRaises(PermissionDenied):
            admin_required(ok_view)(request)

    def test_guard_attaches_profile_to_request(self):
        user = create_user()
        request = self.factory.get("/schedule/")
        request.user = user

        response = member_required(ok_view)(request)

        self.assertEqual(response.content.decode(), f"profile={user.profile.pk}")


# =============================================================================
# DURATION TESTS
# =============================================================================


def test_work_minutes_subtracts_break():
    start = datetime(2024, 5, 1, 9, 0)

    assert work_minutes(start, start + timedelta(hours=8), 60) == 420


def test_work_minutes_without_break():
    start = datetime(2024, 5, 1, 10, 0)

    assert work_minutes(start, start + timedelta(hours=2, minutes=30), 0) == 150


def test_work_minutes_counts_whole_minutes():
    start = datetime(2024, 5, 1, 10, 0)

    assert work_minutes(start, start + timedelta(minutes=10, seconds=59), 0) == 10


@pytest.mark.parametrize(
    "end_offset, break_minutes",
    [
        (timedelta(hours=1), 90),  # break longer than the shift
        (timedelta(hours=-1), 0),  # end before start
    ],
)
def test_work_minutes_clamps_negative_results_to_zero(end_offset, break_minutes):
    start = datetime(2024, 5, 1, 10, 0)

    assert work_minutes(start, start + end_offset, break_minutes) == 0


def test_split_duration():
    assert split_duration(570) == (9, 30)
    assert split_duration(59) == (0, 59)


# =============================================================================
# TEMPLATE FILTER TESTS
# =============================================================================


def test_duration_filter_formats_hours_and_minutes():
    assert duration(570) == "9時間30分"
    assert duration(0) == "0時間0分"


def test_duration_filter_ignores_missing_values():
    assert duration(None) == ""


def test_day_label_for_date():
    # 2024-05-13 is a Monday
    assert day_label(date(2024, 5, 13)) == "5/13 (月)"


def test_day_label_uses_local_date_for_datetimes():
    value = datetime(2024, 5, 12, 16, 0, tzinfo=dt_timezone.utc)  # 01:00 on the 13th in Tokyo

    assert day_label(value) == "5/13 (月)"
