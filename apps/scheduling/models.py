# models.py (Django 5.x) - planned schedules and work reports
#
# A member registers a Schedule ahead of time; once it has ended they file
# exactly one Report with the actual times, break and a reflection.

from __future__ import annotations

from django.db import models
from django.utils import timezone

from apps.core.durations import work_minutes


class Schedule(models.Model):
    """A planned work session owned by one member."""

    owner = models.ForeignKey(
        "accounts.Profile",
        on_delete=models.CASCADE,
        related_name="schedules",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    location = models.CharField(max_length=200)
    description = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_time", "id"]
        indexes = [
            models.Index(fields=["owner", "start_time"], name="schedule_owner_start_idx"),
        ]

    def __str__(self) -> str:
        start = timezone.localtime(self.start_time)
        return f"{start:%Y-%m-%d %H:%M} {self.location}"

    @property
    def has_report(self) -> bool:
        # Reverse one-to-one access raises an AttributeError subclass when absent
        return hasattr(self, "report")

    def is_reportable(self, now=None) -> bool:
        """A report can be filed once the schedule has ended, and only once."""
        now = now or timezone.now()
        return now > self.end_time and not self.has_report


class Report(models.Model):
    """The actual outcome of a Schedule."""

    schedule = models.OneToOneField(
        Schedule,
        on_delete=models.CASCADE,
        related_name="report",
    )
    actual_start_time = models.DateTimeField(db_index=True)
    actual_end_time = models.DateTimeField()
    break_time = models.PositiveIntegerField(default=0)  # minutes
    actual_description = models.TextField()
    reflection = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["actual_start_time", "id"]

    def __str__(self) -> str:
        return f"Report for {self.schedule}"

    @property
    def work_minutes(self) -> int:
        return work_minutes(self.actual_start_time, self.actual_end_time, self.break_time)
