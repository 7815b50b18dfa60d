"""
Scheduling application.

Members register planned work schedules and, once a schedule has ended,
file one work report against it. The schedule page shows the current week.
"""
