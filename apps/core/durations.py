"""Work duration arithmetic shared by report rows and monthly totals."""

from __future__ import annotations

from datetime import datetime


def work_minutes(start: datetime, end: datetime, break_minutes: int) -> int:
    """
    Minutes actually worked between ``start`` and ``end`` minus the break.

    Elapsed time is counted in whole minutes. A result below zero (break
    longer than the elapsed time, or end before start) is clamped to 0;
    new reports cannot produce one because the report form rejects it.
    """
    elapsed = int((end - start).total_seconds() // 60)
    return max(0, elapsed - int(break_minutes))


def split_duration(minutes: int) -> tuple[int, int]:
    """Split a minute count into (hours, minutes)."""
    return divmod(int(minutes), 60)
