"""
Monthly work-hour report for admins.
"""

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps.core.access import admin_required
from apps.scheduling.models import Report

from .aggregation import month_bounds, summarize_by_member
from .forms import MonthFilterForm


@admin_required
@require_GET
def reports_view(request: HttpRequest) -> HttpResponse:
    """Reports started in the selected month, grouped per member."""
    today = timezone.localdate()
    year, month = MonthFilterForm(request.GET).selected(today)
    start, end = month_bounds(year, month)

    reports = (
        Report.objects.filter(actual_start_time__gte=start, actual_start_time__lt=end)
        .select_related("schedule__owner")
        .order_by("actual_start_time", "id")
    )

    context = {
        "summaries": summarize_by_member(reports),
        "year": year,
        "month": month,
        "years": sorted({*range(today.year - 2, today.year + 3), year}),
        "months": range(1, 13),
    }

    # Changing the month selector swaps only the tables
    if request.htmx:
        return render(request, "reports/partials/_report_tables.html", context)
    return render(request, "reports/reports.html", context)
