"""
Tests for member profiles, invitations and member management.

This module tests:
- Profile creation on signup and member removal
- The invitation flow and sign-in links
- The members page (access control, invite and delete intents)

Uses Django TestCase with pytest-django compatibility.
"""

import smtplib
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.scheduling.models import Report, Schedule

from .invitations import make_sign_in_token, read_sign_in_token
from .models import Profile
from .views import INVITE_FAILED

User = get_user_model()


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================


def create_user(username="testuser", password="testpass123", **kwargs):
    """Create and return a test user."""
    return User.objects.create_user(username=username, password=password, **kwargs)


def create_admin(username="admin", password="adminpass123", **kwargs):
    """Create and return a user whose profile has the admin flag."""
    user = create_user(username=username, password=password, **kwargs)
    Profile.objects.filter(user=user).update(is_admin=True)
    return user


def create_schedule(owner, hours_ago=10, **kwargs):
    """Create and return an ended schedule for ``owner``."""
    start = timezone.now() - timedelta(hours=hours_ago)
    return Schedule.objects.create(
        owner=owner,
        start_time=start,
        end_time=start + timedelta(hours=8),
        location=kwargs.pop("location", "本社"),
        description=kwargs.pop("description", "受付業務"),
        **kwargs,
    )


def create_report(schedule, break_time=60):
    """Create and return a report for ``schedule``."""
    return Report.objects.create(
        schedule=schedule,
        actual_start_time=schedule.start_time,
        actual_end_time=schedule.end_time,
        break_time=break_time,
        actual_description="受付業務",
        reflection="問題なし",
    )


def reject_every_address(email):
    """Membership verifier used to exercise the extension seam."""
    return False


# =============================================================================
# PROFILE MODEL TESTS
# =============================================================================


class ProfileSignupTests(TestCase):
    """A Profile is created for every new auth account."""

    def test_profile_created_with_name_and_email(self):
        user = create_user(email="taro@example.com", first_name="Taro", last_name="Yamada")

        profile = Profile.objects.get(user=user)
        self.assertEqual(profile.full_name, "Taro Yamada")
        self.assertEqual(profile.email, "taro@example.com")
        self.assertFalse(profile.is_admin)

    def test_superuser_profile_is_admin(self):
        user = User.objects.create_superuser(username="root", password="x", email="root@example.com")

        self.assertTrue(user.profile.is_admin)

    def test_saving_existing_user_does_not_duplicate_profile(self):
        user = create_user()
        user.first_name = "Changed"
        user.save()

        self.assertEqual(Profile.objects.filter(user=user).count(), 1)

    def test_display_name_falls_back_to_email_then_username(self):
        user = create_user(username="hanako")
        profile = user.profile

        self.assertEqual(profile.display_name, "hanako")
        profile.email = "hanako@example.com"
        self.assertEqual(profile.display_name, "hanako@example.com")
        profile.full_name = "Hanako"
        self.assertEqual(str(profile), "Hanako")

    def test_profiles_ordered_by_creation(self):
        first = create_user(username="first").profile
        second = create_user(username="second").profile

        self.assertEqual(list(Profile.objects.all()), [first, second])


class ProfileRemoveTests(TestCase):
    """
    Tests for Profile.remove().

    Removal cascades to the member's schedules and reports and deactivates
    the login account.
    """

    def test_remove_deletes_only_that_profile(self):
        keep = create_user(username="keep").profile
        gone = create_user(username="gone").profile

        gone.remove()

        self.assertTrue(Profile.objects.filter(pk=keep.pk).exists())
        self.assertEqual(Profile.objects.count(), 1)

    def test_remove_cascades_schedules_and_reports(self):
        profile = create_user().profile
        schedule = create_schedule(profile)
        create_report(schedule)

        profile.remove()

        self.assertFalse(Schedule.objects.filter(pk=schedule.pk).exists())
        self.assertEqual(Report.objects.count(), 0)

    def test_remove_keeps_other_members_records(self):
        other = create_user(username="other").profile
        other_schedule = create_schedule(other)
        create_user().profile.remove()

        self.assertTrue(Schedule.objects.filter(pk=other_schedule.pk).exists())

    def test_remove_deactivates_login(self):
        user = create_user()

        user.profile.remove()
        user.refresh_from_db()

        self.assertFalse(user.is_active)


# =============================================================================
# INVITATION TESTS
# =============================================================================


class SignInTokenTests(TestCase):
    """Tests for signed sign-in tokens."""

    def test_token_round_trip(self):
        user = create_user()

        self.assertEqual(read_sign_in_token(make_sign_in_token(user)), user)

    def test_tampered_token_is_rejected(self):
        token = make_sign_in_token(create_user())

        self.assertIsNone(read_sign_in_token(token + "x"))

    def test_expired_token_is_rejected(self):
        token = make_sign_in_token(create_user())

        self.assertIsNone(read_sign_in_token(token, max_age=-1))

    def test_token_stops_working_after_login(self):
        user = create_user()
        token = make_sign_in_token(user)
        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

        self.assertIsNone(read_sign_in_token(token))

    def test_token_for_inactive_account_is_rejected(self):
        user = create_user()
        token = make_sign_in_token(user)
        user.is_active = False
        user.save(update_fields=["is_active"])

        self.assertIsNone(read_sign_in_token(token))


class SignInWithLinkViewTests(TestCase):
    """Tests for the invitation link view."""

    def test_valid_link_logs_in_and_redirects_to_schedule(self):
        user = create_user()
        url = reverse("accounts:sign_in_with_link", args=[make_sign_in_token(user)])

        response = self.client.get(url)

        self.assertRedirects(response, reverse("scheduling:schedule"))
        self.assertEqual(int(self.client.session["_auth_user_id"]), user.pk)

    def test_link_cannot_be_reused(self):
        user = create_user()
        url = reverse("accounts:sign_in_with_link", args=[make_sign_in_token(user)])
        self.client.get(url)
        self.client.logout()

        response = self.client.get(url)

        self.assertEqual(response.status_code, 400)
        self.assertTemplateUsed(response, "accounts/link_invalid.html")

    def test_invalid_link_renders_error(self):
        response = self.client.get(reverse("accounts:sign_in_with_link", args=["not-a-token"]))

        self.assertEqual(response.status_code, 400)
        self.assertNotIn("_auth_user_id", self.client.session)


# =============================================================================
# MEMBERS VIEW TESTS
# =============================================================================


class MembersAccessTests(TestCase):
    """Only admins reach the members page, on every method."""

    def setUp(self):
        self.url = reverse("accounts:members")

    def test_anonymous_is_redirected_to_login(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("login"), response.url)

    def test_member_gets_access_denied(self):
        self.client.force_login(create_user())

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 403)

    def test_member_cannot_post_invite(self):
        self.client.force_login(create_user())

        response = self.client.post(self.url, {
            "intent": "invite",
            "email": "new@example.com",
            "full_name": "New",
        })

        self.assertEqual(response.status_code, 403)
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(User.objects.filter(email="new@example.com").exists())

    def test_member_cannot_post_delete(self):
        victim = create_user(username="victim")
        self.client.force_login(create_user())

        response = self.client.post(self.url, {"intent": "delete", "user_id": victim.profile.pk})

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Profile.objects.filter(user=victim).exists())

    def test_admin_sees_all_members_in_creation_order(self):
        admin = create_admin(email="admin@example.com")
        create_user(username="m1", email="m1@example.com")
        create_user(username="m2", email="m2@example.com")
        self.client.force_login(admin)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        emails = [p.email for p in response.context["members"]]
        self.assertEqual(emails, ["admin@example.com", "m1@example.com", "m2@example.com"])
        self.assertContains(response, "管理者")


class InviteIntentTests(TestCase):
    """Tests for the invite intent."""

    def setUp(self):
        self.url = reverse("accounts:members")
        self.admin = create_admin()
        self.client.force_login(self.admin)

    def test_valid_invite_creates_account_and_sends_link(self):
        response = self.client.post(self.url, {
            "intent": "invite",
            "email": "Hanako@Example.com",
            "full_name": "Hanako Suzuki",
        })

        self.assertRedirects(response, self.url)
        user = User.objects.get(email="hanako@example.com")
        self.assertFalse(user.has_usable_password())
        self.assertEqual(user.profile.full_name, "Hanako Suzuki")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["hanako@example.com"])
        self.assertIn("/login/link/", mail.outbox[0].body)

    def test_invitation_link_signs_in_the_invited_member(self):
        self.client.post(self.url, {
            "intent": "invite",
            "email": "hanako@example.com",
            "full_name": "Hanako",
        })
        link = next(line for line in mail.outbox[0].body.splitlines() if "/login/link/" in line)
        self.client.logout()

        response = self.client.get(link.strip())

        self.assertRedirects(response, reverse("scheduling:schedule"))

    def test_invalid_email_returns_field_error(self):
        response = self.client.post(self.url, {
            "intent": "invite",
            "email": "not-an-email",
            "full_name": "Someone",
        })

        self.assertEqual(response.status_code, 200)
        self.assertIn("email", response.context["invite_form"].errors)
        self.assertEqual(len(mail.outbox), 0)

    def test_blank_name_returns_field_error(self):
        response = self.client.post(self.url, {
            "intent": "invite",
            "email": "someone@example.com",
            "full_name": "   ",
        })

        self.assertEqual(
            response.context["invite_form"].errors["full_name"],
            ["名前を入力してください"],
        )
        self.assertFalse(User.objects.filter(email="someone@example.com").exists())

    @override_settings(KINMU_MEMBERSHIP_VERIFIER="apps.accounts.tests.reject_every_address")
    def test_membership_verifier_can_reject_address(self):
        response = self.client.post(self.url, {
            "intent": "invite",
            "email": "outsider@example.com",
            "full_name": "Outsider",
        })

        self.assertIn("email", response.context["invite_form"].errors)
        self.assertEqual(len(mail.outbox), 0)

    def test_mail_failure_shows_generic_error_and_rolls_back(self):
        with patch("apps.accounts.invitations.send_mail", side_effect=smtplib.SMTPException("down")):
            response = self.client.post(self.url, {
                "intent": "invite",
                "email": "hanako@example.com",
                "full_name": "Hanako",
            })

        self.assertEqual(response.status_code, 200)
        self.assertIn(INVITE_FAILED, [str(m) for m in response.context["messages"]])
        self.assertFalse(User.objects.filter(email="hanako@example.com").exists())

    def test_reinviting_removed_member_reactivates_account(self):
        user = create_user(username="back@example.com", email="back@example.com")
        user.profile.remove()

        self.client.post(self.url, {
            "intent": "invite",
            "email": "back@example.com",
            "full_name": "Back Again",
        })

        user.refresh_from_db()
        self.assertTrue(user.is_active)
        self.assertEqual(Profile.objects.get(user=user).full_name, "Back Again")

    def test_unknown_intent_is_bad_request(self):
        response = self.client.post(self.url, {"intent": "promote"})

        self.assertEqual(response.status_code, 400)


class DeleteIntentTests(TestCase):
    """Tests for the delete intent."""

    def setUp(self):
        self.url = reverse("accounts:members")
        self.admin = create_admin()
        self.client.force_login(self.admin)

    def test_delete_removes_member_and_their_records(self):
        member = create_user(username="member")
        schedule = create_schedule(member.profile)
        create_report(schedule)

        response = self.client.post(self.url, {"intent": "delete", "user_id": member.profile.pk})

        self.assertRedirects(response, self.url)
        self.assertFalse(Profile.objects.filter(user=member).exists())
        self.assertEqual(Schedule.objects.count(), 0)
        self.assertEqual(Report.objects.count(), 0)

    def test_removed_member_session_stops_working(self):
        member = create_user(username="member")
        member_client = self.client_class()
        member_client.force_login(member)
        self.client.post(self.url, {"intent": "delete", "user_id": member.profile.pk})

        response = member_client.get(reverse("scheduling:schedule"))

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("login"), response.url)

    def test_admin_cannot_delete_themselves(self):
        response = self.client.post(
            self.url,
            {"intent": "delete", "user_id": self.admin.profile.pk},
            follow=True,
        )

        self.assertTrue(Profile.objects.filter(user=self.admin).exists())
        self.assertIn("自分自身は削除できません", [str(m) for m in response.context["messages"]])

    def test_unknown_member_is_reported(self):
        response = self.client.post(self.url, {"intent": "delete", "user_id": 999999}, follow=True)

        self.assertIn("メンバーが見つかりません", [str(m) for m in response.context["messages"]])

    def test_htmx_delete_returns_member_table_partial(self):
        member = create_user(username="member")

        response = self.client.post(
            self.url,
            {"intent": "delete", "user_id": member.profile.pk},
            HTTP_HX_REQUEST="true",
        )

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "accounts/partials/_member_table.html")
        self.assertTemplateNotUsed(response, "accounts/members.html")
        self.assertNotContains(response, f'id="member-{member.profile.pk}"')
