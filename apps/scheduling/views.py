"""
Views for the weekly schedule page.

One page carries two write intents:
- create: register a new planned schedule
- report: file the work report for an ended schedule
"""

import logging

from django.contrib import messages
from django.db import DatabaseError, transaction
from django.http import HttpRequest, HttpResponse, HttpResponseBadRequest
from django.shortcuts import redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.core.access import member_required

from .forms import ReportForm, ScheduleForm
from .models import Schedule
from .week import bucket_by_day, week_days

logger = logging.getLogger(__name__)

CREATE_FAILED = "予定の登録に失敗しました"
REPORT_FAILED = "実績の登録に失敗しました"


def _render_week(request: HttpRequest, *, create_form=None, report_form=None) -> HttpResponse:
    now = timezone.now()
    schedules = (
        Schedule.objects.filter(owner=request.profile)
        .select_related("report")
        .order_by("start_time", "id")
    )

    context = {
        "columns": bucket_by_day(schedules, week_days(timezone.localdate(now)), now=now),
        "create_form": create_form or ScheduleForm(),
        "report_form": report_form,
        "failed_report_id": report_form.data.get("schedule_id", "") if report_form else "",
    }
    return render(request, "scheduling/schedule.html", context)


@member_required
@require_http_methods(["GET", "POST"])
def schedule_view(request: HttpRequest) -> HttpResponse:
    """Current week of the member's schedules."""
    if request.method == "GET":
        return _render_week(request)

    intent = request.POST.get("intent")
    if intent == "create":
        return _handle_create(request)
    if intent == "report":
        return _handle_report(request)
    return HttpResponseBadRequest("Unknown intent")


def _handle_create(request: HttpRequest) -> HttpResponse:
    form = ScheduleForm(request.POST)
    if not form.is_valid():
        return _render_week(request, create_form=form)

    form.instance.owner = request.profile
    try:
        schedule = form.save()
    except DatabaseError:
        logger.exception("Creating schedule for profile %s failed", request.profile.pk)
        messages.error(request, CREATE_FAILED)
        return _render_week(request, create_form=form)

    logger.info("Profile %s created schedule %s", request.profile.pk, schedule.pk)
    messages.success(request, "予定を登録しました")
    return redirect("scheduling:schedule")


def _handle_report(request: HttpRequest) -> HttpResponse:
    form = ReportForm(request.POST, owner=request.profile)
    if not form.is_valid():
        for error in form.errors.get("schedule_id", []):
            messages.error(request, error)
        return _render_week(request, report_form=form)

    try:
        # The one-to-one constraint rejects a concurrent second report
        with transaction.atomic():
            report = form.save()
    except DatabaseError:
        logger.exception(
            "Filing report for schedule %s failed",
            form.cleaned_data["schedule_id"].pk,
        )
        messages.error(request, REPORT_FAILED)
        return _render_week(request, report_form=form)

    logger.info("Profile %s filed report %s", request.profile.pk, report.pk)
    messages.success(request, "実績を報告しました")
    return redirect("scheduling:schedule")
