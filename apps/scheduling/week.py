"""Current-week layout for the schedule page."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from django.utils import timezone


@dataclass(frozen=True)
class ScheduleEntry:
    schedule: object
    reportable: bool


@dataclass
class DayColumn:
    day: date
    entries: list[ScheduleEntry] = field(default_factory=list)


def week_days(today: date) -> list[date]:
    """The seven days of the Monday-start week containing ``today``."""
    monday = today - timedelta(days=today.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


def bucket_by_day(schedules, days: list[date], *, now: datetime) -> list[DayColumn]:
    """
    Place each schedule in the column whose date matches its local start date.

    Schedules starting outside ``days`` are dropped. Input order is kept
    within a column.
    """
    columns = {day: DayColumn(day) for day in days}
    for schedule in schedules:
        column = columns.get(timezone.localdate(schedule.start_time))
        if column is None:
            continue
        column.entries.append(ScheduleEntry(schedule, schedule.is_reportable(now)))
    return list(columns.values())
