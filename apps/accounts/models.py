# models.py (Django 5.x) - member profiles
#
# A Profile is created for every auth account (see signals.py) and carries
# the name shown on reports and the admin flag.

from __future__ import annotations

from django.conf import settings
from django.db import models, transaction


class Profile(models.Model):
    """A member of the workspace."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    full_name = models.CharField(max_length=120, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    is_admin = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or self.user.get_username()

    def remove(self) -> None:
        """
        Remove the member.

        The profile's schedules and reports are deleted with it (foreign key
        cascade) and the login account is deactivated, which ends any session
        it still holds.
        """
        with transaction.atomic():
            user = self.user
            self.delete()
            user.is_active = False
            user.save(update_fields=["is_active"])
