"""
Access control gate shared by every protected view.

``resolve_access`` turns a request into one of three outcomes:

- ALLOW: an authenticated member with a profile (and the admin flag, when
  the view requires it). The profile is attached to ``request.profile``.
- REDIRECT: no authenticated session. The caller is sent to the login page;
  this is never treated as an error.
- DENY: a session exists but the profile is missing, or an admin-only view
  was requested by a non-admin. Raised as ``PermissionDenied`` (HTTP 403).

The decorators wrap the whole view, so GET and POST handlers go through the
same check.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from functools import wraps

from django.contrib.auth.views import redirect_to_login
from django.core.exceptions import PermissionDenied
from django.http import HttpRequest

logger = logging.getLogger(__name__)

ADMIN_ONLY_MESSAGE = "管理者以外はアクセスできません"
NO_PROFILE_MESSAGE = "メンバー登録がありません"


class Decision(enum.Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    DENY = "deny"


@dataclass(frozen=True)
class AccessOutcome:
    decision: Decision
    profile: object | None = None
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOW


def lookup_profile(user):
    """Return the profile for an authenticated user, or None."""
    from apps.accounts.models import Profile

    if not user.is_authenticated:
        return None
    return Profile.objects.filter(user=user).first()


def resolve_access(request: HttpRequest, *, admin: bool = False) -> AccessOutcome:
    """Decide whether ``request`` may reach a member (or admin) view."""
    if not request.user.is_authenticated:
        return AccessOutcome(Decision.REDIRECT)

    profile = lookup_profile(request.user)
    if profile is None:
        return AccessOutcome(Decision.DENY, reason=NO_PROFILE_MESSAGE)
    if admin and not profile.is_admin:
        return AccessOutcome(Decision.DENY, profile=profile, reason=ADMIN_ONLY_MESSAGE)
    return AccessOutcome(Decision.ALLOW, profile=profile)


def _guard(view_func, *, admin: bool):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        outcome = resolve_access(request, admin=admin)
        if outcome.decision is Decision.REDIRECT:
            return redirect_to_login(request.get_full_path())
        if outcome.decision is Decision.DENY:
            logger.warning(
                "Access denied to %s for user %s: %s",
                request.path,
                request.user.pk,
                outcome.reason,
            )
            raise PermissionDenied(outcome.reason)
        request.profile = outcome.profile
        return view_func(request, *args, **kwargs)

    return wrapper


def member_required(view_func):
    """Allow any signed-in member with a profile."""
    return _guard(view_func, admin=False)


def admin_required(view_func):
    """Allow signed-in members whose profile carries the admin flag."""
    return _guard(view_func, admin=True)
