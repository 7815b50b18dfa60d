"""
Member management (admins) and invitation sign-in.
"""

import logging

from django.contrib import messages
from django.contrib.auth import login
from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse, HttpResponseBadRequest
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_http_methods

from apps.core.access import admin_required

from .forms import InviteForm, RemoveMemberForm
from .invitations import InvitationError, invite_member, read_sign_in_token
from .models import Profile

logger = logging.getLogger(__name__)

INVITE_FAILED = "招待メールの送信に失敗しました"
DELETE_FAILED = "メンバーの削除に失敗しました"


def _members_context(invite_form=None):
    return {
        "members": Profile.objects.select_related("user").order_by("created_at", "id"),
        "invite_form": invite_form or InviteForm(),
    }


@admin_required
@require_http_methods(["GET", "POST"])
def members_view(request: HttpRequest) -> HttpResponse:
    """Member list with the invite and delete intents."""
    if request.method == "GET":
        return render(request, "accounts/members.html", _members_context())

    intent = request.POST.get("intent")
    if intent == "invite":
        return _handle_invite(request)
    if intent == "delete":
        return _handle_delete(request)
    return HttpResponseBadRequest("Unknown intent")


def _handle_invite(request: HttpRequest) -> HttpResponse:
    form = InviteForm(request.POST)
    if form.is_valid():
        email = form.cleaned_data["email"]

        def build_link(token):
            return request.build_absolute_uri(reverse("accounts:sign_in_with_link", args=[token]))

        try:
            invite_member(email, form.cleaned_data["full_name"], build_link=build_link)
        except (InvitationError, DatabaseError):
            logger.exception("Invitation to %s failed", email)
            messages.error(request, INVITE_FAILED)
        else:
            messages.success(request, f"{email} に招待メールを送信しました")
            return redirect("accounts:members")

    return render(request, "accounts/members.html", _members_context(invite_form=form))


def _handle_delete(request: HttpRequest) -> HttpResponse:
    form = RemoveMemberForm(request.POST, acting_profile=request.profile)
    if form.is_valid():
        profile = form.cleaned_data["user_id"]
        name, profile_pk = profile.display_name, profile.pk
        try:
            profile.remove()
        except DatabaseError:
            logger.exception("Removing profile %s failed", profile_pk)
            messages.error(request, DELETE_FAILED)
        else:
            logger.info("Profile %s removed by %s", profile_pk, request.profile.pk)
            messages.success(request, f"{name} を削除しました")
    else:
        for error in form.errors.get("user_id", []):
            messages.error(request, error)

    if request.htmx:
        return render(request, "accounts/partials/_member_table.html", _members_context())
    return redirect("accounts:members")


@require_GET
def sign_in_with_link(request: HttpRequest, token: str) -> HttpResponse:
    """Log in the account an invitation link was issued for."""
    user = read_sign_in_token(token)
    if user is None:
        return render(request, "accounts/link_invalid.html", status=400)

    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    logger.info("User %s signed in with an invitation link", user.pk)
    return redirect("scheduling:schedule")
