"""Time and date helpers for display and deadline checks."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tasktrack.models import Task

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def start_of_day(moment: datetime) -> datetime:
    """Return local midnight of the day containing ``moment``."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Return the half-open [midnight, next midnight) window around ``moment``."""
    start = start_of_day(moment)
    return start, start + timedelta(days=1)


def format_duration(minutes: int) -> str:
    """Format minutes as ``45m``, ``2h`` or ``2h 5m``."""
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


def format_time(seconds: int) -> str:
    """Format seconds as a clock reading, ``MM:SS`` or ``HH:MM:SS``."""
    hours, remainder = divmod(seconds, 3600)
    mins, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def relative_date(date: datetime, now: datetime | None = None) -> str:
    """Describe a date relative to today.

    Args:
        date: The date to describe
        now: Reference moment (defaults to the current time)

    Returns:
        "Today", "Tomorrow", "Yesterday", "In N days" or "N days ago" within
        a week either side, otherwise a short absolute label like "Jan 5"
    """
    if now is None:
        now = datetime.now()

    target = start_of_day(date)
    diff_days = (target.date() - start_of_day(now).date()).days

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Tomorrow"
    if diff_days == -1:
        return "Yesterday"
    if 1 < diff_days <= 7:
        return f"In {diff_days} days"
    if -7 <= diff_days < -1:
        return f"{abs(diff_days)} days ago"

    return f"{MONTH_ABBREVIATIONS[target.month - 1]} {target.day}"


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """Check whether an unfinished task's due day is already behind us."""
    if task.due_date is None or task.status == "completed":
        return False
    if now is None:
        now = datetime.now()
    return task.due_date.date() < now.date()
