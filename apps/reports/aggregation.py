"""
Monthly work-hour aggregation.

Reports are grouped by the profile that owns their schedule. Each group
keeps its rows in query order together with a running total of worked
minutes; worked minutes come from ``Report.work_minutes`` and are never
stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time

from django.utils import timezone


@dataclass(frozen=True)
class ReportRow:
    report: object
    work_minutes: int


@dataclass
class MemberSummary:
    profile_id: int
    full_name: str
    rows: list[ReportRow] = field(default_factory=list)
    total_minutes: int = 0

    def add(self, report) -> None:
        minutes = report.work_minutes
        self.rows.append(ReportRow(report, minutes))
        self.total_minutes += minutes


def month_range(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """``month_range`` as aware midnights in the current time zone."""
    start, end = month_range(year, month)
    return (
        timezone.make_aware(datetime.combine(start, time.min)),
        timezone.make_aware(datetime.combine(end, time.min)),
    )


def summarize_by_member(reports) -> list[MemberSummary]:
    """Group reports by owning profile, in order of first appearance."""
    summaries: dict[int, MemberSummary] = {}
    for report in reports:
        owner = report.schedule.owner
        summary = summaries.get(owner.pk)
        if summary is None:
            summary = summaries[owner.pk] = MemberSummary(owner.pk, owner.display_name)
        summary.add(report)
    return list(summaries.values())
