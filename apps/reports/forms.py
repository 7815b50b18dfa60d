"""Query string form for the reports page."""

from datetime import date

from django import forms


class MonthFilterForm(forms.Form):
    """
    Optional ``year`` and ``month`` query parameters.

    Missing or invalid values fall back to the month containing ``today``.
    """

    year = forms.IntegerField(min_value=1900, max_value=9998, required=False)
    month = forms.IntegerField(min_value=1, max_value=12, required=False)

    def selected(self, today: date) -> tuple[int, int]:
        self.is_valid()
        year = self.cleaned_data.get("year") or today.year
        month = self.cleaned_data.get("month") or today.month
        return year, month
