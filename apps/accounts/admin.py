"""Django admin configuration for accounts app."""

from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin for member profiles."""
    list_display = ["full_name", "email", "is_admin", "created_at"]
    list_filter = ["is_admin"]
    list_editable = ["is_admin"]
    search_fields = ["full_name", "email", "user__username"]
    readonly_fields = ["created_at"]
    ordering = ["created_at"]
