"""
Tests for the scheduling app.

This module tests:
- Schedule and Report models (reportability, one report per schedule)
- Current-week layout helpers
- The schedule page and its create / report intents

Uses Django TestCase with pytest-django compatibility.
"""

from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from unittest.mock import patch

import pytest

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from .forms import ReportForm
from .models import Report, Schedule
from .views import REPORT_FAILED
from .week import bucket_by_day, week_days

User = get_user_model()


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================


def local(*args):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(datetime(*args))


# Wednesday; the current week runs from 2024-05-13 to 2024-05-19
NOW = local(2024, 5, 15, 12, 0)


def create_user(username="testuser", password="testpass123", **kwargs):
    """Create and return a test user."""
    return User.objects.create_user(username=username, password=password, **kwargs)


def create_schedule(owner, start, end, location="本社", description="受付業務"):
    """Create and return a schedule."""
    return Schedule.objects.create(
        owner=owner,
        start_time=start,
        end_time=end,
        location=location,
        description=description,
    )


def create_report(schedule, break_time=60):
    """Create and return a report covering the planned times."""
    return Report.objects.create(
        schedule=schedule,
        actual_start_time=schedule.start_time,
        actual_end_time=schedule.end_time,
        break_time=break_time,
        actual_description="受付業務",
        reflection="問題なし",
    )


def report_data(schedule, **overrides):
    data = {
        "intent": "report",
        "schedule_id": schedule.pk,
        "actual_start_time": "2024-05-14T09:00",
        "actual_end_time": "2024-05-14T17:00",
        "break_time": "60",
        "actual_description": "受付と電話対応",
        "reflection": "混雑なし",
    }
    data.update(overrides)
    return data


# =============================================================================
# MODEL TESTS
# =============================================================================


class ScheduleModelTests(TestCase):
    """Tests for Schedule reportability."""

    def setUp(self):
        self.profile = create_user().profile

    def test_ended_schedule_without_report_is_reportable(self):
        schedule = create_schedule(self.profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))

        self.assertTrue(schedule.is_reportable(NOW))
        self.assertFalse(schedule.has_report)

    def test_schedule_still_running_is_not_reportable(self):
        schedule = create_schedule(self.profile, local(2024, 5, 15, 9), local(2024, 5, 15, 17))

        self.assertFalse(schedule.is_reportable(NOW))

    def test_reported_schedule_is_not_reportable(self):
        schedule = create_schedule(self.profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))
        create_report(schedule)
        schedule.refresh_from_db()

        self.assertTrue(schedule.has_report)
        self.assertFalse(schedule.is_reportable(NOW))

    def test_str_uses_local_start_and_location(self):
        schedule = create_schedule(self.profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))

        self.assertEqual(str(schedule), "2024-05-14 09:00 本社")


class ReportModelTests(TestCase):
    """Tests for Report."""

    def setUp(self):
        profile = create_user().profile
        self.schedule = create_schedule(profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))

    def test_work_minutes_subtracts_break(self):
        report = create_report(self.schedule, break_time=60)

        self.assertEqual(report.work_minutes, 420)

    def test_second_report_for_same_schedule_is_rejected_by_database(self):
        create_report(self.schedule)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                create_report(self.schedule)

        self.assertEqual(Report.objects.count(), 1)


# =============================================================================
# WEEK LAYOUT TESTS
# =============================================================================


def test_week_days_start_on_monday():
    days = week_days(date(2024, 5, 15))

    assert days[0] == date(2024, 5, 13)
    assert days[-1] == date(2024, 5, 19)
    assert len(days) == 7


def test_week_days_on_sunday_belong_to_previous_monday():
    assert week_days(date(2024, 5, 19))[0] == date(2024, 5, 13)


def test_bucket_by_day_uses_local_start_date():
    # 16:00 UTC on Sunday the 12th is 01:00 on Monday the 13th in Tokyo
    early = Schedule(
        start_time=datetime(2024, 5, 12, 16, 0, tzinfo=dt_timezone.utc),
        end_time=datetime(2024, 5, 12, 20, 0, tzinfo=dt_timezone.utc),
    )
    # 00:30 on Monday the 20th in Tokyo, outside the week
    late = Schedule(
        start_time=datetime(2024, 5, 19, 15, 30, tzinfo=dt_timezone.utc),
        end_time=datetime(2024, 5, 19, 18, 0, tzinfo=dt_timezone.utc),
    )

    columns = bucket_by_day([early, late], week_days(date(2024, 5, 15)), now=NOW)

    assert [entry.schedule for entry in columns[0].entries] == [early]
    assert sum(len(column.entries) for column in columns) == 1


def test_bucket_by_day_marks_reportable_entries():
    ended = Schedule(start_time=local(2024, 5, 14, 9), end_time=local(2024, 5, 14, 17))
    upcoming = Schedule(start_time=local(2024, 5, 16, 9), end_time=local(2024, 5, 16, 17))

    columns = bucket_by_day([ended, upcoming], week_days(date(2024, 5, 15)), now=NOW)

    assert columns[1].entries[0].reportable is True
    assert columns[3].entries[0].reportable is False


def test_bucket_by_day_keeps_order_within_a_day():
    later = Schedule(start_time=local(2024, 5, 14, 13), end_time=local(2024, 5, 14, 17))
    earlier = Schedule(start_time=local(2024, 5, 14, 9), end_time=local(2024, 5, 14, 12))

    columns = bucket_by_day([earlier, later], week_days(date(2024, 5, 15)), now=NOW)

    assert [entry.schedule for entry in columns[1].entries] == [earlier, later]


# =============================================================================
# VIEW TESTS
# =============================================================================


class ScheduleViewTestCase(TestCase):
    """Freezes the clock at NOW and logs a member in."""

    def setUp(self):
        patcher = patch("django.utils.timezone.now", return_value=NOW)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.url = reverse("scheduling:schedule")
        self.user = create_user()
        self.profile = self.user.profile
        self.client.force_login(self.user)


class ScheduleViewAccessTests(TestCase):
    def test_anonymous_is_redirected_to_login(self):
        url = reverse("scheduling:schedule")

        response = self.client.get(url)

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("login"), response.url)

    def test_anonymous_post_is_redirected_without_writing(self):
        response = self.client.post(reverse("scheduling:schedule"), {"intent": "create"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(Schedule.objects.count(), 0)

    def test_home_redirects_to_schedule(self):
        response = self.client.get("/")

        self.assertRedirects(response, reverse("scheduling:schedule"), fetch_redirect_response=False)


class ScheduleWeekViewTests(ScheduleViewTestCase):
    """Tests for the GET side of the schedule page."""

    def test_shows_seven_day_columns(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        days = [column.day for column in response.context["columns"]]
        self.assertEqual(days, week_days(date(2024, 5, 15)))
        self.assertContains(response, "5/13 (月)")

    def test_shows_only_own_schedules_of_current_week(self):
        own = create_schedule(self.profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))
        next_week = create_schedule(self.profile, local(2024, 5, 21, 9), local(2024, 5, 21, 17))
        other = create_user(username="other").profile
        foreign = create_schedule(other, local(2024, 5, 14, 9), local(2024, 5, 14, 17))

        response = self.client.get(self.url)

        self.assertContains(response, f'id="schedule-{own.pk}"')
        self.assertNotContains(response, f'id="schedule-{next_week.pk}"')
        self.assertNotContains(response, f'id="schedule-{foreign.pk}"')

    def test_report_button_only_for_ended_unreported_schedules(self):
        ended = create_schedule(self.profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))
        upcoming = create_schedule(self.profile, local(2024, 5, 16, 9), local(2024, 5, 16, 17))
        reported = create_schedule(self.profile, local(2024, 5, 13, 9), local(2024, 5, 13, 17))
        create_report(reported)

        response = self.client.get(self.url)

        self.assertContains(response, f'id="report-{ended.pk}"')
        self.assertNotContains(response, f'id="report-{upcoming.pk}"')
        self.assertNotContains(response, f'id="report-{reported.pk}"')
        self.assertContains(response, "報告済み")

    def test_unknown_intent_is_bad_request(self):
        response = self.client.post(self.url, {"intent": "archive"})

        self.assertEqual(response.status_code, 400)

    def test_missing_intent_is_bad_request(self):
        response = self.client.post(self.url, {})

        self.assertEqual(response.status_code, 400)


class CreateIntentTests(ScheduleViewTestCase):
    """Tests for the create intent."""

    def _post(self, **overrides):
        data = {
            "intent": "create",
            "start_time": "2024-05-16T09:00",
            "end_time": "2024-05-16T17:00",
            "location": "本社",
            "description": "受付業務",
        }
        data.update(overrides)
        return self.client.post(self.url, data)

    def test_valid_schedule_is_created_for_current_member(self):
        response = self._post()

        self.assertRedirects(response, self.url)
        schedule = Schedule.objects.get()
        self.assertEqual(schedule.owner, self.profile)
        self.assertEqual(schedule.start_time, local(2024, 5, 16, 9))
        self.assertEqual(schedule.end_time, local(2024, 5, 16, 17))

    def test_created_schedule_appears_once_in_week(self):
        self._post()
        schedule = Schedule.objects.get()

        response = self.client.get(self.url)

        self.assertContains(response, f'id="schedule-{schedule.pk}"', count=1)

    def test_missing_location_is_rejected(self):
        response = self._post(location="")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.context["create_form"].errors["location"],
            ["場所を入力してください"],
        )
        self.assertEqual(Schedule.objects.count(), 0)

    def test_end_before_start_is_rejected(self):
        response = self._post(end_time="2024-05-16T08:00")

        self.assertIn("end_time", response.context["create_form"].errors)
        self.assertEqual(Schedule.objects.count(), 0)

    def test_malformed_time_is_rejected(self):
        response = self._post(start_time="tomorrow")

        self.assertIn("start_time", response.context["create_form"].errors)
        self.assertEqual(Schedule.objects.count(), 0)


class ReportIntentTests(ScheduleViewTestCase):
    """Tests for the report intent."""

    def setUp(self):
        super().setUp()
        self.schedule = create_schedule(self.profile, local(2024, 5, 14, 9), local(2024, 5, 14, 17))

    def _messages(self, response):
        return [str(m) for m in response.context["messages"]]

    def test_valid_report_is_filed(self):
        response = self.client.post(self.url, report_data(self.schedule))

        self.assertRedirects(response, self.url)
        report = Report.objects.get(schedule=self.schedule)
        self.assertEqual(report.break_time, 60)
        self.assertEqual(report.work_minutes, 420)
        self.assertEqual(report.reflection, "混雑なし")

    def test_second_report_is_rejected(self):
        self.client.post(self.url, report_data(self.schedule))

        response = self.client.post(self.url, report_data(self.schedule, reflection="二回目"))

        self.assertEqual(response.status_code, 200)
        self.assertIn("この予定には実績を報告できません", self._messages(response))
        self.assertEqual(Report.objects.count(), 1)
        self.assertEqual(Report.objects.get().reflection, "混雑なし")

    def test_report_on_another_members_schedule_is_rejected(self):
        other = create_user(username="other").profile
        foreign = create_schedule(other, local(2024, 5, 14, 9), local(2024, 5, 14, 17))

        response = self.client.post(self.url, report_data(foreign))

        self.assertIn("この予定には実績を報告できません", self._messages(response))
        self.assertFalse(Report.objects.filter(schedule=foreign).exists())

    def test_report_before_schedule_ends_is_rejected(self):
        running = create_schedule(self.profile, local(2024, 5, 15, 9), local(2024, 5, 15, 17))

        self.client.post(self.url, report_data(
            running,
            actual_start_time="2024-05-15T09:00",
            actual_end_time="2024-05-15T11:00",
            break_time="0",
        ))

        self.assertFalse(Report.objects.filter(schedule=running).exists())

    def test_break_longer_than_elapsed_time_is_rejected(self):
        response = self.client.post(self.url, report_data(
            self.schedule,
            actual_end_time="2024-05-14T10:00",
            break_time="90",
        ))

        form = response.context["report_form"]
        self.assertIn("break_time", form.errors)
        self.assertEqual(response.context["failed_report_id"], str(self.schedule.pk))
        self.assertEqual(Report.objects.count(), 0)

    def test_end_before_start_is_rejected(self):
        response = self.client.post(self.url, report_data(
            self.schedule,
            actual_end_time="2024-05-14T08:00",
        ))

        self.assertIn("actual_end_time", response.context["report_form"].errors)
        self.assertEqual(Report.objects.count(), 0)

    def test_negative_break_is_rejected(self):
        response = self.client.post(self.url, report_data(self.schedule, break_time="-15"))

        self.assertIn("break_time", response.context["report_form"].errors)
        self.assertEqual(Report.objects.count(), 0)

    def test_storage_failure_shows_generic_error(self):
        with patch.object(ReportForm, "save", side_effect=DatabaseError("locked")):
            response = self.client.post(self.url, report_data(self.schedule))

        self.assertEqual(response.status_code, 200)
        self.assertIn(REPORT_FAILED, self._messages(response))
        self.assertEqual(Report.objects.count(), 0)


# =============================================================================
# FIXTURE-BASED TESTS
# =============================================================================


@pytest.mark.django_db
def test_upcoming_schedule_is_not_reportable(upcoming_schedule, ended_schedule):
    assert not upcoming_schedule.is_reportable()
    assert ended_schedule.is_reportable()


@pytest.mark.django_db
def test_reported_schedule_shows_as_reported(authenticated_client, user, freeze_time, local_datetime):
    schedule = create_schedule(user.profile, local_datetime(2024, 5, 14, 9), local_datetime(2024, 5, 14, 17))
    create_report(schedule)

    with freeze_time(local_datetime(2024, 5, 15, 12)):
        response = authenticated_client.get(reverse("scheduling:schedule"))

    content = response.content.decode()
    assert response.status_code == 200
    assert f'id="schedule-{schedule.pk}"' in content
    assert f'id="report-{schedule.pk}"' not in content
    assert "報告済み" in content


@pytest.mark.django_db
def test_other_member_does_not_see_schedule(client, another_user, ended_schedule):
    client.force_login(another_user)

    response = client.get(reverse("scheduling:schedule"))

    assert f'id="schedule-{ended_schedule.pk}"'.encode() not in response.content
