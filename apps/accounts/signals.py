"""Create a Profile whenever a new auth account is saved."""

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile_on_signup(sender, instance, created, raw=False, **kwargs):
    if not created or raw:
        return
    Profile.objects.get_or_create(
        user=instance,
        defaults={
            "full_name": instance.get_full_name(),
            "email": instance.email,
            "is_admin": instance.is_superuser,
        },
    )
    logger.info("Created profile for user %s", instance.pk)
