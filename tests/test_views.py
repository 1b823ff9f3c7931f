"""Tests for tasktrack.views module."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from tasktrack.views import (
    category_stats,
    dashboard_stats,
    estimate_vs_actual,
    filter_and_sort,
    partition_by_due,
    streak,
    weekly_activity,
)

from .fakes import FIXED_NOW, make_task


def _days_ago(days: int, hour: int = 12) -> datetime:
    return (FIXED_NOW - timedelta(days=days)).replace(hour=hour)


def _ids(tasks) -> list[str]:
    return [t.id for t in tasks]


class TestCategoryStats:
    """Tests for category_stats."""

    def test_groups_and_sums(self) -> None:
        tasks = [
            make_task(id="a", category="work", actual_time_minutes=30),
            make_task(id="b", category="health", actual_time_minutes=45),
            make_task(id="c", category="work", actual_time_minutes=15),
        ]

        stats = category_stats(tasks)

        assert [(s.category, s.name, s.minutes, s.tasks) for s in stats] == [
            ("work", "Work", 45, 2),
            ("health", "Health", 45, 1),
        ]

    def test_empty(self) -> None:
        assert category_stats([]) == []


class TestWeeklyActivity:
    """Tests for weekly_activity."""

    def test_seven_days_oldest_first(self) -> None:
        days = weekly_activity([], FIXED_NOW)

        assert len(days) == 7
        assert days[0].date == datetime(2025, 1, 9)
        assert days[-1].date == datetime(2025, 1, 15)
        assert [d.day for d in days] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]

    def test_counts_completions_per_day(self) -> None:
        tasks = [
            make_task(id="a", status="completed", completed_at=_days_ago(0, 8),
                      actual_time_minutes=20),
            make_task(id="b", status="completed", completed_at=_days_ago(0, 9),
                      actual_time_minutes=10),
            make_task(id="c", status="completed", completed_at=_days_ago(2),
                      actual_time_minutes=50),
            make_task(id="d", status="completed", completed_at=_days_ago(7)),
            make_task(id="e"),
        ]

        days = weekly_activity(tasks, FIXED_NOW)

        assert [(d.completed, d.minutes) for d in days] == [
            (0, 0), (0, 0), (0, 0), (0, 0), (1, 50), (0, 0), (2, 30),
        ]


class TestEstimateVsActual:
    """Tests for estimate_vs_actual."""

    def test_pairs_completed_tasks_only(self) -> None:
        tasks = [
            make_task(id="a", title="Short", status="completed",
                      estimated_time_minutes=30, actual_time_minutes=40),
            make_task(id="b", title="Open", estimated_time_minutes=30),
            make_task(id="c", title="No estimate", status="completed",
                      estimated_time_minutes=0),
        ]

        rows = estimate_vs_actual(tasks)

        assert [(r.name, r.estimated, r.actual) for r in rows] == [("Short", 30, 40)]

    def test_truncates_long_titles(self) -> None:
        tasks = [
            make_task(title="Exactly 15 char", status="completed"),
            make_task(id="b", title="Review Q1 marketing strategy", status="completed"),
        ]

        assert [r.name for r in estimate_vs_actual(tasks)] == [
            "Exactly 15 char",
            "Review Q1 marke...",
        ]

    def test_keeps_last_ten(self) -> None:
        tasks = [
            make_task(id=str(i), title=f"T{i}", status="completed") for i in range(12)
        ]

        rows = estimate_vs_actual(tasks)

        assert [r.name for r in rows] == [f"T{i}" for i in range(2, 12)]


class TestPartitionByDue:
    """Tests for partition_by_due."""

    def test_overdue_excluded_from_other_buckets(self) -> None:
        task = make_task(due_date=_days_ago(1))

        partition = partition_by_due([task], FIXED_NOW)

        assert partition.overdue == [task]
        assert partition.today == []
        assert partition.upcoming == []

    def test_buckets(self) -> None:
        tasks = [
            make_task(id="today-early", due_date=datetime(2025, 1, 15, 6)),
            make_task(id="today-late", due_date=datetime(2025, 1, 15, 22)),
            make_task(id="tomorrow", due_date=datetime(2025, 1, 16)),
            make_task(id="six-days", due_date=datetime(2025, 1, 21, 23)),
            make_task(id="week-out", due_date=datetime(2025, 1, 22)),
            make_task(id="old", due_date=datetime(2025, 1, 1)),
            make_task(id="done", status="completed", due_date=datetime(2025, 1, 15)),
            make_task(id="undated"),
        ]

        partition = partition_by_due(tasks, FIXED_NOW)

        assert _ids(partition.overdue) == ["old"]
        assert _ids(partition.today) == ["today-early", "today-late"]
        assert _ids(partition.upcoming) == ["tomorrow", "six-days"]


class TestFilterAndSort:
    """Tests for filter_and_sort."""

    @pytest.fixture
    def tasks(self):
        return [
            make_task(id="low-soon", priority=4, due_date=datetime(2025, 1, 16),
                      created_at=datetime(2025, 1, 1)),
            make_task(id="undated", priority=2, category="health",
                      created_at=datetime(2025, 1, 3)),
            make_task(id="urgent-late", priority=1, due_date=datetime(2025, 2, 1),
                      created_at=datetime(2025, 1, 2), status="in-progress"),
            make_task(id="mid", priority=3, due_date=datetime(2025, 1, 20),
                      created_at=datetime(2025, 1, 4), category="health"),
        ]

    def test_priority_ascending(self, tasks) -> None:
        result = filter_and_sort(tasks)
        assert _ids(result) == ["urgent-late", "undated", "mid", "low-soon"]

    def test_priority_descending(self, tasks) -> None:
        result = filter_and_sort(tasks, direction="desc")
        assert _ids(result) == ["low-soon", "mid", "undated", "urgent-late"]

    def test_due_date_puts_undated_last(self, tasks) -> None:
        result = filter_and_sort(tasks, sort_field="due_date")
        assert _ids(result) == ["low-soon", "mid", "urgent-late", "undated"]

    def test_due_date_descending_is_exact_reverse(self, tasks) -> None:
        result = filter_and_sort(tasks, sort_field="due_date", direction="desc")
        assert _ids(result) == ["undated", "urgent-late", "mid", "low-soon"]

    def test_created_at(self, tasks) -> None:
        result = filter_and_sort(tasks, sort_field="created_at")
        assert _ids(result) == ["low-soon", "urgent-late", "undated", "mid"]

    def test_filters_combine(self, tasks) -> None:
        assert _ids(filter_and_sort(tasks, category="health")) == ["undated", "mid"]
        assert _ids(filter_and_sort(tasks, category="health", priority=3)) == ["mid"]
        assert _ids(filter_and_sort(tasks, status="in-progress")) == ["urgent-late"]
        assert filter_and_sort(tasks, category="learning") == []

    def test_ties_keep_collection_order(self) -> None:
        tasks = [make_task(id=str(i), priority=2) for i in range(5)]

        assert _ids(filter_and_sort(tasks)) == ["0", "1", "2", "3", "4"]
        assert _ids(filter_and_sort(tasks, direction="desc")) == ["0", "1", "2", "3", "4"]

    def test_does_not_mutate_input(self, tasks) -> None:
        before = list(tasks)
        filter_and_sort(tasks, direction="desc")
        assert tasks == before

    def test_unknown_sort_field(self, tasks) -> None:
        with pytest.raises(ValueError):
            filter_and_sort(tasks, sort_field="title")  # type: ignore[arg-type]


class TestStreak:
    """Tests for streak."""

    def _completed_on(self, *days_ago: int):
        return [
            make_task(id=str(d), status="completed", completed_at=_days_ago(d))
            for d in days_ago
        ]

    def test_no_completions(self) -> None:
        assert streak([], FIXED_NOW) == 0

    def test_run_including_today(self) -> None:
        assert streak(self._completed_on(0, 1, 2), FIXED_NOW) == 3

    def test_today_without_completions_keeps_yesterdays_run(self) -> None:
        assert streak(self._completed_on(1, 2), FIXED_NOW) == 2

    def test_gap_ends_run(self) -> None:
        assert streak(self._completed_on(0, 1, 3, 4), FIXED_NOW) == 2

    def test_gap_of_two_days(self) -> None:
        assert streak(self._completed_on(2, 3), FIXED_NOW) == 0

    def test_multiple_completions_same_day(self) -> None:
        tasks = self._completed_on(0) + [
            make_task(id="x", status="completed", completed_at=_days_ago(0, 23))
        ]
        assert streak(tasks, FIXED_NOW) == 1


class TestDashboardStats:
    """Tests for dashboard_stats."""

    def test_counts(self) -> None:
        tasks = [
            make_task(id="a", status="completed", completed_at=_days_ago(0, 8),
                      actual_time_minutes=25),
            make_task(id="b", status="completed", completed_at=_days_ago(3),
                      actual_time_minutes=40),
            make_task(id="c", status="completed", completed_at=_days_ago(10)),
            make_task(id="d", status="in-progress"),
            make_task(id="e"),
        ]

        stats = dashboard_stats(tasks, FIXED_NOW)

        assert stats.completed_today == 1
        assert stats.completed_this_week == 2
        assert stats.total_time_today == 25
        assert stats.pending_tasks == 2
        assert stats.in_progress_tasks == 1
        assert stats.streak == 1
