"""
Tests for the monthly report page.

This module tests:
- Month range and query parameter handling
- Per-member aggregation of work minutes
- The admin-only reports view
"""

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.accounts.models import Profile
from apps.scheduling.models import Report, Schedule

from .aggregation import month_bounds, month_range, summarize_by_member
from .forms import MonthFilterForm

User = get_user_model()


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================


def local(*args):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(datetime(*args))


def create_user(username="testuser", password="testpass123", **kwargs):
    """Create and return a test user."""
    return User.objects.create_user(username=username, password=password, **kwargs)


def create_admin(username="admin", password="adminpass123", **kwargs):
    """Create and return a user whose profile has the admin flag."""
    user = create_user(username=username, password=password, **kwargs)
    Profile.objects.filter(user=user).update(is_admin=True)
    return user


def file_report(owner, start, end, break_time=0, location="本社"):
    """Create a schedule with the same times and a report for it."""
    schedule = Schedule.objects.create(
        owner=owner,
        start_time=start,
        end_time=end,
        location=location,
        description="受付業務",
    )
    return Report.objects.create(
        schedule=schedule,
        actual_start_time=start,
        actual_end_time=end,
        break_time=break_time,
        actual_description="受付業務",
        reflection="問題なし",
    )


# =============================================================================
# MONTH HANDLING TESTS
# =============================================================================


def test_month_range_within_year():
    assert month_range(2024, 5) == (date(2024, 5, 1), date(2024, 6, 1))


def test_month_range_december_rolls_over():
    assert month_range(2024, 12) == (date(2024, 12, 1), date(2025, 1, 1))


def test_month_bounds_are_local_midnights():
    start, end = month_bounds(2024, 5)

    assert timezone.localtime(start) == local(2024, 5, 1)
    assert timezone.localtime(end) == local(2024, 6, 1)


def test_month_filter_defaults_to_today():
    assert MonthFilterForm({}).selected(date(2024, 5, 15)) == (2024, 5)


def test_month_filter_uses_given_values():
    form = MonthFilterForm({"year": "2023", "month": "12"})

    assert form.selected(date(2024, 5, 15)) == (2023, 12)


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"year": "abc", "month": "3"}, (2024, 3)),
        ({"year": "2023", "month": "13"}, (2023, 5)),
        ({"year": "2023", "month": "0"}, (2023, 5)),
        ({"year": "", "month": ""}, (2024, 5)),
    ],
)
def test_month_filter_falls_back_per_field(params, expected):
    assert MonthFilterForm(params).selected(date(2024, 5, 15)) == expected


# =============================================================================
# AGGREGATION TESTS
# =============================================================================


def _fake_report(owner, minutes):
    return SimpleNamespace(schedule=SimpleNamespace(owner=owner), work_minutes=minutes)


def test_summarize_groups_by_owner_in_first_appearance_order():
    hanako = SimpleNamespace(pk=2, display_name="Hanako")
    taro = SimpleNamespace(pk=1, display_name="Taro")
    reports = [
        _fake_report(hanako, 60),
        _fake_report(taro, 120),
        _fake_report(hanako, 30),
    ]

    summaries = summarize_by_member(reports)

    assert [s.full_name for s in summaries] == ["Hanako", "Taro"]
    assert [row.work_minutes for row in summaries[0].rows] == [60, 30]
    assert summaries[0].total_minutes == 90
    assert summaries[1].total_minutes == 120


def test_summarize_empty():
    assert summarize_by_member([]) == []


class MonthlyTotalsTests(TestCase):
    """Totals computed from stored reports."""

    def test_total_for_one_member(self):
        profile = create_user(first_name="Taro", last_name="Yamada").profile
        file_report(profile, local(2024, 5, 1, 9), local(2024, 5, 1, 17), break_time=60)
        file_report(profile, local(2024, 5, 2, 10), local(2024, 5, 2, 12, 30))

        summaries = summarize_by_member(
            Report.objects.select_related("schedule__owner").order_by("actual_start_time")
        )

        self.assertEqual(len(summaries), 1)
        self.assertEqual([row.work_minutes for row in summaries[0].rows], [420, 150])
        self.assertEqual(summaries[0].total_minutes, 570)
        self.assertEqual(summaries[0].full_name, "Taro Yamada")


# =============================================================================
# VIEW TESTS
# =============================================================================


class ReportsAccessTests(TestCase):
    """Only admins reach the reports page."""

    def setUp(self):
        self.url = reverse("reports:monthly")

    def test_anonymous_is_redirected_to_login(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("login"), response.url)

    def test_member_gets_access_denied(self):
        self.client.force_login(create_user())

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 403)
        self.assertContains(response, "管理者以外はアクセスできません", status_code=403)

    def test_post_is_not_allowed(self):
        self.client.force_login(create_admin())

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 405)


class ReportsViewTests(TestCase):
    """Tests for the monthly report listing."""

    def setUp(self):
        self.url = reverse("reports:monthly")
        self.client.force_login(create_admin())
        self.taro = create_user(username="taro", first_name="Taro", last_name="Yamada").profile
        self.hanako = create_user(username="hanako", first_name="Hanako", last_name="Suzuki").profile

    def test_lists_month_totals_per_member(self):
        file_report(self.taro, local(2024, 5, 1, 9), local(2024, 5, 1, 17), break_time=60)
        file_report(self.taro, local(2024, 5, 2, 10), local(2024, 5, 2, 12, 30))

        response = self.client.get(self.url, {"year": 2024, "month": 5})

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "reports/reports.html")
        summaries = response.context["summaries"]
        self.assertEqual([s.full_name for s in summaries], ["Taro Yamada"])
        self.assertEqual(summaries[0].total_minutes, 570)
        self.assertContains(response, "9時間30分")
        self.assertContains(response, "7時間0分")

    def test_members_ordered_by_first_report(self):
        file_report(self.hanako, local(2024, 5, 1, 9), local(2024, 5, 1, 12))
        file_report(self.taro, local(2024, 5, 3, 9), local(2024, 5, 3, 12))
        file_report(self.hanako, local(2024, 5, 5, 9), local(2024, 5, 5, 12))

        response = self.client.get(self.url, {"year": 2024, "month": 5})

        names = [s.full_name for s in response.context["summaries"]]
        self.assertEqual(names, ["Hanako Suzuki", "Taro Yamada"])

    def test_only_reports_started_in_selected_month(self):
        file_report(self.taro, local(2024, 4, 30, 22), local(2024, 5, 1, 2))
        inside = file_report(self.taro, local(2024, 5, 31, 22), local(2024, 6, 1, 2))

        response = self.client.get(self.url, {"year": 2024, "month": 5})

        rows = response.context["summaries"][0].rows
        self.assertEqual([row.report for row in rows], [inside])

    def test_december_includes_new_years_eve_only(self):
        eve = file_report(self.taro, local(2024, 12, 31, 9), local(2024, 12, 31, 17))
        file_report(self.taro, local(2025, 1, 1, 9), local(2025, 1, 1, 17))

        response = self.client.get(self.url, {"year": 2024, "month": 12})

        rows = response.context["summaries"][0].rows
        self.assertEqual([row.report for row in rows], [eve])

    def test_empty_month_shows_message(self):
        response = self.client.get(self.url, {"year": 2024, "month": 2})

        self.assertEqual(response.context["summaries"], [])
        self.assertContains(response, "2024年2月の実績はありません")

    def test_invalid_parameters_fall_back_to_current_month(self):
        today = timezone.localdate()

        response = self.client.get(self.url, {"year": "x", "month": "99"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["year"], today.year)
        self.assertEqual(response.context["month"], today.month)

    def test_selected_year_is_offered_in_selector(self):
        response = self.client.get(self.url, {"year": 2001, "month": 1})

        self.assertIn(2001, response.context["years"])
        self.assertEqual(list(response.context["months"]), list(range(1, 13)))

    def test_htmx_request_returns_tables_partial(self):
        file_report(self.taro, local(2024, 5, 1, 9), local(2024, 5, 1, 17), break_time=60)

        response = self.client.get(
            self.url,
            {"year": 2024, "month": 5},
            HTTP_HX_REQUEST="true",
        )

        self.assertTemplateUsed(response, "reports/partials/_report_tables.html")
        self.assertTemplateNotUsed(response, "reports/reports.html")
        self.assertContains(response, "7時間0分")


# =============================================================================
# FIXTURE-BASED TESTS
# =============================================================================


@pytest.mark.django_db
def test_admin_sees_report_from_fixture(admin_member_client, report):
    start = timezone.localtime(report.actual_start_time)

    response = admin_member_client.get(
        reverse("reports:monthly"),
        {"year": start.year, "month": start.month},
    )

    assert response.status_code == 200
    assert response.context["summaries"][0].total_minutes == 420


@pytest.mark.django_db
def test_member_cannot_see_reports(authenticated_client):
    response = authenticated_client.get(reverse("reports:monthly"))

    assert response.status_code == 403


def test_month_bounds_span_whole_month():
    start, end = month_bounds(2024, 2)

    assert end - start == timedelta(days=29)
