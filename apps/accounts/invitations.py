"""
Passwordless invitations.

An admin invites an address; the address gets an auth account without a
usable password and an e-mail with a signed sign-in link. Following the link
logs the account in (see ``views.sign_in_with_link``).

Before anything is created the address goes through the membership verifier
named by ``KINMU_MEMBERSHIP_VERIFIER``. The default accepts every address; a
deployment that wants to restrict invitations to members of an external
workspace (a chat workspace directory, an LDAP group) points the setting at
its own ``callable(email) -> bool``.
"""

from __future__ import annotations

import logging
import smtplib

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing
from django.core.mail import send_mail
from django.db import transaction
from django.template.loader import render_to_string
from django.utils.module_loading import import_string

from .models import Profile

logger = logging.getLogger(__name__)

SIGN_IN_SALT = "apps.accounts.invitations.sign-in"


class InvitationError(Exception):
    """The invitation could not be delivered."""


def accept_any_address(email: str) -> bool:
    """Default membership verifier: no external directory is consulted."""
    return True


def is_workspace_member(email: str) -> bool:
    verifier = import_string(settings.KINMU_MEMBERSHIP_VERIFIER)
    return bool(verifier(email))


def _login_stamp(user) -> str:
    return user.last_login.isoformat() if user.last_login else ""


def make_sign_in_token(user) -> str:
    """
    Sign a token for ``user``.

    The token embeds the account's last login time, so it stops working once
    it has been used to sign in.
    """
    return signing.dumps({"uid": user.pk, "ll": _login_stamp(user)}, salt=SIGN_IN_SALT)


def read_sign_in_token(token: str, max_age: int | None = None):
    """Return the active account a token was issued for, or None."""
    if max_age is None:
        max_age = settings.KINMU_INVITE_MAX_AGE
    try:
        payload = signing.loads(token, salt=SIGN_IN_SALT, max_age=max_age)
    except signing.BadSignature:
        return None

    user = get_user_model().objects.filter(pk=payload.get("uid"), is_active=True).first()
    if user is None or payload.get("ll") != _login_stamp(user):
        return None
    return user


def _account_for(email: str):
    User = get_user_model()
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        # No password: the account signs in through invitation links only
        return User.objects.create_user(username=email, email=email)
    if not user.is_active:
        user.is_active = True
        user.save(update_fields=["is_active"])
    return user


def invite_member(email: str, full_name: str, *, build_link) -> Profile:
    """
    Create (or reactivate) the account for ``email`` and mail it a sign-in link.

    ``build_link`` turns a token into an absolute URL. Delivery problems raise
    InvitationError and roll back the account changes.
    """
    with transaction.atomic():
        user = _account_for(email)
        profile, _ = Profile.objects.update_or_create(
            user=user,
            defaults={"full_name": full_name, "email": email},
        )

        link = build_link(make_sign_in_token(user))
        body = render_to_string(
            "accounts/email/invitation.txt",
            {"full_name": full_name, "link": link},
        )
        try:
            send_mail(
                "Kinmu への招待",
                body,
                settings.DEFAULT_FROM_EMAIL,
                [email],
                fail_silently=False,
            )
        except (smtplib.SMTPException, OSError) as exc:
            raise InvitationError(f"could not send invitation to {email}") from exc

    logger.info("Invited %s as profile %s", email, profile.pk)
    return profile
