"""Django admin configuration for scheduling app."""

from django.contrib import admin

from .models import Report, Schedule


class ReportInline(admin.StackedInline):
    model = Report
    extra = 0
    readonly_fields = ["created_at"]


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    """Admin for planned schedules with their report inline."""
    list_display = ["start_time", "end_time", "owner", "location"]
    list_filter = ["start_time", "owner"]
    search_fields = ["location", "description", "owner__full_name"]
    list_select_related = ["owner"]
    ordering = ["-start_time"]
    inlines = [ReportInline]


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    """Admin for work reports."""
    list_display = ["actual_start_time", "actual_end_time", "break_time", "schedule"]
    list_filter = ["actual_start_time"]
    search_fields = ["actual_description", "reflection", "schedule__owner__full_name"]
    readonly_fields = ["created_at"]
    ordering = ["-actual_start_time"]
