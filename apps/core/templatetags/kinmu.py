"""Template filters for rendering dates and work durations."""

from django import template
from django.utils import timezone

from apps.core.durations import split_duration

register = template.Library()

WEEKDAYS = "月火水木金土日"


@register.filter
def duration(minutes):
    """Render a minute count as 'H時間M分'."""
    if minutes in (None, ""):
        return ""
    hours, rest = split_duration(minutes)
    return f"{hours}時間{rest}分"


@register.filter
def day_label(value):
    """Render a date or datetime as 'M/D (曜)'."""
    if value is None:
        return ""
    if hasattr(value, "hour"):
        value = timezone.localtime(value)
    return f"{value.month}/{value.day} ({WEEKDAYS[value.weekday()]})"
