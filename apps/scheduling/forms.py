"""Forms for the create and report intents of the schedule page."""

from django import forms
from django.utils import timezone

from .models import Report, Schedule

DATETIME_LOCAL = "%Y-%m-%dT%H:%M"


def _datetime_input():
    return forms.DateTimeInput(attrs={"type": "datetime-local"}, format=DATETIME_LOCAL)


class ScheduleForm(forms.ModelForm):
    class Meta:
        model = Schedule
        fields = ["start_time", "end_time", "location", "description"]
        widgets = {
            "start_time": _datetime_input(),
            "end_time": _datetime_input(),
            "description": forms.Textarea(attrs={"rows": 3}),
        }
        error_messages = {
            "start_time": {
                "required": "開始時間を入力してください",
                "invalid": "開始時間の形式が正しくありません",
            },
            "end_time": {
                "required": "終了時間を入力してください",
                "invalid": "終了時間の形式が正しくありません",
            },
            "location": {"required": "場所を入力してください"},
            "description": {"required": "業務内容を入力してください"},
        }

    def clean(self):
        cleaned_data = super().clean()
        start = cleaned_data.get("start_time")
        end = cleaned_data.get("end_time")
        if start and end and end <= start:
            self.add_error("end_time", "終了時間は開始時間より後にしてください")
        return cleaned_data


class ReportForm(forms.ModelForm):
    """
    Report against one of the owner's ended, unreported schedules.

    The choices for ``schedule_id`` are limited to those schedules, so a
    foreign, still running or already reported schedule fails validation.
    """

    schedule_id = forms.ModelChoiceField(
        queryset=Schedule.objects.none(),
        widget=forms.HiddenInput,
        error_messages={
            "required": "予定を選択してください",
            "invalid_choice": "この予定には実績を報告できません",
        },
    )

    class Meta:
        model = Report
        fields = [
            "actual_start_time",
            "actual_end_time",
            "break_time",
            "actual_description",
            "reflection",
        ]
        widgets = {
            "actual_start_time": _datetime_input(),
            "actual_end_time": _datetime_input(),
            "break_time": forms.NumberInput(attrs={"min": 0, "step": 15}),
            "actual_description": forms.Textarea(attrs={"rows": 3}),
            "reflection": forms.Textarea(attrs={"rows": 3}),
        }
        error_messages = {
            "actual_start_time": {
                "required": "実際の開始時間を入力してください",
                "invalid": "開始時間の形式が正しくありません",
            },
            "actual_end_time": {
                "required": "実際の終了時間を入力してください",
                "invalid": "終了時間の形式が正しくありません",
            },
            "break_time": {
                "required": "休憩時間を入力してください",
                "invalid": "休憩時間は分単位の整数で入力してください",
                "min_value": "休憩時間は0分以上で入力してください",
            },
            "actual_description": {"required": "業務内容を入力してください"},
            "reflection": {"required": "振り返りを入力してください"},
        }

    def __init__(self, *args, owner, now=None, **kwargs):
        super().__init__(*args, **kwargs)
        now = now or timezone.now()
        self.fields["schedule_id"].queryset = Schedule.objects.filter(
            owner=owner,
            end_time__lt=now,
            report__isnull=True,
        )

    def clean(self):
        cleaned_data = super().clean()
        start = cleaned_data.get("actual_start_time")
        end = cleaned_data.get("actual_end_time")
        break_time = cleaned_data.get("break_time")
        if start and end:
            if end <= start:
                self.add_error("actual_end_time", "終了時間は開始時間より後にしてください")
            elif break_time is not None and break_time > (end - start).total_seconds() // 60:
                self.add_error("break_time", "休憩時間が勤務時間を超えています")
        return cleaned_data

    def save(self, commit=True):
        self.instance.schedule = self.cleaned_data["schedule_id"]
        return super().save(commit=commit)
