"""
Context processors for the Kinmu project.
"""

from .access import lookup_profile


def navigation(request):
    """
    Expose the current profile and admin flag to the layout.

    Views wrapped by the access guard already carry ``request.profile``;
    anything else (login page, error pages) is looked up here.

    Returns:
        dict with 'current_profile' and 'is_admin' keys
    """
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return {"current_profile": None, "is_admin": False}

    profile = getattr(request, "profile", None)
    if profile is None:
        profile = lookup_profile(user)

    return {
        "current_profile": profile,
        "is_admin": bool(profile and profile.is_admin),
    }
