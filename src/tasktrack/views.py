"""Derived views over a snapshot of tasks.

Every function here is pure: it takes a sequence of tasks (usually
``store.tasks``) plus an optional reference moment and recomputes its result
from scratch.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal

from tasktrack.models import CATEGORY_LABELS, Category, Priority, Task, TaskStatus
from tasktrack.timeutil import day_window, is_overdue, start_of_day

SortField = Literal["priority", "due_date", "created_at"]
SortDirection = Literal["asc", "desc"]

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Estimate-vs-actual chart settings
COMPARISON_LIMIT = 10
COMPARISON_TITLE_LENGTH = 15


@dataclass
class CategoryStat:
    """Tracked time and task count for one category."""

    category: Category
    name: str
    minutes: int = 0
    tasks: int = 0


@dataclass
class DayActivity:
    """Completions on a single calendar day."""

    date: datetime
    day: str
    completed: int = 0
    minutes: int = 0


@dataclass
class TimeComparison:
    """Estimated against actual minutes for one completed task."""

    name: str
    estimated: int
    actual: int


@dataclass
class DuePartition:
    """Unfinished tasks bucketed by deadline."""

    overdue: list[Task] = field(default_factory=list)
    today: list[Task] = field(default_factory=list)
    upcoming: list[Task] = field(default_factory=list)


@dataclass
class DashboardStats:
    """Headline numbers for the dashboard."""

    completed_today: int = 0
    completed_this_week: int = 0
    total_time_today: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    streak: int = 0


def _completed_within(task: Task, start: datetime, end: datetime) -> bool:
    return task.completed_at is not None and start <= task.completed_at < end


def category_stats(tasks: Sequence[Task]) -> list[CategoryStat]:
    """Group tasks by category, in order of first appearance."""
    stats: dict[str, CategoryStat] = {}
    for task in tasks:
        stat = stats.get(task.category)
        if stat is None:
            stat = stats[task.category] = CategoryStat(
                category=task.category, name=CATEGORY_LABELS[task.category]
            )
        stat.minutes += task.actual_time_minutes
        stat.tasks += 1
    return list(stats.values())


def weekly_activity(tasks: Sequence[Task], now: datetime | None = None) -> list[DayActivity]:
    """Completions for each of the last 7 days, oldest first, today last."""
    if now is None:
        now = datetime.now()

    days = []
    for offset in range(6, -1, -1):
        start, end = day_window(now - timedelta(days=offset))
        done = [t for t in tasks if _completed_within(t, start, end)]
        days.append(
            DayActivity(
                date=start,
                day=WEEKDAY_ABBREVIATIONS[start.weekday()],
                completed=len(done),
                minutes=sum(t.actual_time_minutes for t in done),
            )
        )
    return days


def _short_title(title: str) -> str:
    if len(title) > COMPARISON_TITLE_LENGTH:
        return title[:COMPARISON_TITLE_LENGTH] + "..."
    return title


def estimate_vs_actual(tasks: Sequence[Task]) -> list[TimeComparison]:
    """Pair estimates with tracked time for the most recent completed tasks.

    "Most recent" follows collection order, so the last ten completed tasks
    with a non-zero estimate are used.
    """
    completed = [t for t in tasks if t.status == "completed" and t.estimated_time_minutes > 0]
    return [
        TimeComparison(
            name=_short_title(t.title),
            estimated=t.estimated_time_minutes,
            actual=t.actual_time_minutes,
        )
        for t in completed[-COMPARISON_LIMIT:]
    ]


def partition_by_due(tasks: Sequence[Task], now: datetime | None = None) -> DuePartition:
    """Split unfinished tasks into overdue, due today and due within the week.

    Upcoming covers tomorrow through six days out; anything overdue appears
    only in the overdue bucket.
    """
    if now is None:
        now = datetime.now()

    today = start_of_day(now)
    tomorrow = today + timedelta(days=1)
    next_week = today + timedelta(days=7)

    partition = DuePartition()
    for task in tasks:
        if task.status == "completed" or task.due_date is None:
            continue
        if is_overdue(task, now):
            partition.overdue.append(task)
        elif start_of_day(task.due_date) == today:
            partition.today.append(task)
        elif tomorrow <= task.due_date < next_week:
            partition.upcoming.append(task)
    return partition


def _sort_key(sort_field: SortField):
    if sort_field == "priority":
        return lambda t: t.priority
    if sort_field == "due_date":
        # Undated tasks go after every dated one
        return lambda t: (t.due_date is None, t.due_date or datetime.min)
    if sort_field == "created_at":
        return lambda t: t.created_at
    raise ValueError(f"Unknown sort field: {sort_field}")


def filter_and_sort(
    tasks: Sequence[Task],
    category: Category | Literal["all"] = "all",
    priority: Priority | Literal["all"] = "all",
    status: TaskStatus | Literal["all"] = "all",
    sort_field: SortField = "priority",
    direction: SortDirection = "asc",
) -> list[Task]:
    """Filter by category, priority and status, then sort by one key.

    Each filter is skipped when set to "all". Descending order is the exact
    reverse of ascending, so undated tasks lead when sorting by due date
    descending. Ties keep their collection order.

    Raises:
        ValueError: If ``sort_field`` isn't a known field
    """
    result = [
        t for t in tasks
        if (category == "all" or t.category == category)
        and (priority == "all" or t.priority == priority)
        and (status == "all" or t.status == status)
    ]

    result.sort(key=_sort_key(sort_field), reverse=direction == "desc")
    return result


def streak(tasks: Sequence[Task], now: datetime | None = None) -> int:
    """Count consecutive days with at least one completion, ending today.

    Today without completions yet doesn't break the run: the streak counted
    back from yesterday is returned instead.
    """
    if now is None:
        now = datetime.now()

    completion_days = {t.completed_at.date() for t in tasks if t.completed_at is not None}

    day = now.date()
    if day not in completion_days:
        day -= timedelta(days=1)

    count = 0
    while day in completion_days:
        count += 1
        day -= timedelta(days=1)
    return count


def dashboard_stats(tasks: Sequence[Task], now: datetime | None = None) -> DashboardStats:
    """Compute the dashboard's headline numbers."""
    if now is None:
        now = datetime.now()

    today_start, today_end = day_window(now)
    week_ago = today_start - timedelta(days=7)

    done_today = [t for t in tasks if _completed_within(t, today_start, today_end)]

    return DashboardStats(
        completed_today=len(done_today),
        completed_this_week=sum(
            1 for t in tasks if t.completed_at is not None and t.completed_at >= week_ago
        ),
        total_time_today=sum(t.actual_time_minutes for t in done_today),
        pending_tasks=sum(1 for t in tasks if t.status != "completed"),
        in_progress_tasks=sum(1 for t in tasks if t.status == "in-progress"),
        streak=streak(tasks, now),
    )
