"""Tests for tasktrack.seed module."""

from __future__ import annotations

import random

from tasktrack.models import TaskDraft
from tasktrack.seed import sample_drafts, seed_tasks
from tasktrack.store import TaskStore

from .fakes import FIXED_NOW


def test_seeds_empty_store(store: TaskStore) -> None:
    added = seed_tasks(store, random.Random(0))

    assert added == len(sample_drafts(FIXED_NOW)) == 8
    assert len(store.tasks) == 8


def test_completed_samples_have_tracked_time(store: TaskStore) -> None:
    seed_tasks(store, random.Random(0))

    completed = store.completed_tasks()
    assert [t.title for t in completed] == ["Morning workout session", "Team standup meeting"]
    for task in completed:
        assert task.completed_at == FIXED_NOW
        low = round(task.estimated_time_minutes * 0.8)
        high = round(task.estimated_time_minutes * 1.2)
        assert low <= task.actual_time_minutes <= high


def test_does_nothing_when_tasks_exist(store: TaskStore) -> None:
    store.add(TaskDraft(title="Mine"))

    assert seed_tasks(store) == 0
    assert len(store.tasks) == 1


def test_due_dates_relative_to_now() -> None:
    drafts = sample_drafts(FIXED_NOW)
    offsets = sorted({(d.due_date - FIXED_NOW).days for d in drafts if d.due_date})
    assert offsets == [0, 1, 2, 3]
