"""Sample tasks for a first run."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from tasktrack.models import TaskDraft
from tasktrack.store import TaskStore


def sample_drafts(now: datetime) -> list[TaskDraft]:
    """Build the sample task set with deadlines relative to ``now``."""
    tomorrow = now + timedelta(days=1)
    return [
        TaskDraft(
            title="Review Q1 marketing strategy",
            description="Analyze campaign performance and prepare recommendations for next quarter",
            category="work",
            priority=1,
            due_date=now,
            status="in-progress",
            estimated_time_minutes=90,
        ),
        TaskDraft(
            title="Morning workout session",
            description="30 min cardio + strength training",
            category="health",
            priority=2,
            due_date=now,
            status="completed",
            estimated_time_minutes=45,
        ),
        TaskDraft(
            title="Complete React course module 5",
            description="Learn about hooks and context API",
            category="learning",
            priority=2,
            due_date=tomorrow,
            status="pending",
            estimated_time_minutes=60,
        ),
        TaskDraft(
            title="Call mom for her birthday",
            description="Don't forget to send flowers!",
            category="personal",
            priority=1,
            due_date=now,
            status="pending",
            estimated_time_minutes=30,
        ),
        TaskDraft(
            title="Prepare client presentation",
            description="Finalize slides and practice delivery",
            category="work",
            priority=1,
            due_date=now + timedelta(days=2),
            status="pending",
            estimated_time_minutes=120,
        ),
        TaskDraft(
            title="Grocery shopping",
            description="Buy vegetables, fruits, and weekly essentials",
            category="personal",
            priority=3,
            due_date=tomorrow,
            status="pending",
            estimated_time_minutes=45,
        ),
        TaskDraft(
            title="Team standup meeting",
            description="Daily sync with the engineering team",
            category="work",
            priority=2,
            due_date=now,
            status="completed",
            estimated_time_minutes=15,
        ),
        TaskDraft(
            title='Read 20 pages of "Atomic Habits"',
            description="Continue from chapter 4",
            category="learning",
            priority=4,
            due_date=now + timedelta(days=3),
            status="pending",
            estimated_time_minutes=30,
        ),
    ]


def seed_tasks(store: TaskStore, rng: random.Random | None = None) -> int:
    """Fill an empty store with sample tasks.

    Completed samples get an actual time within 20% of their estimate.

    Returns:
        Number of tasks added (0 if the store already had tasks)
    """
    if store.tasks:
        return 0

    if rng is None:
        rng = random.Random()

    drafts = sample_drafts(store.now())
    for draft in drafts:
        task = store.add(draft)
        if task.status == "completed":
            store.update(
                task.id,
                actual_time_minutes=round(task.estimated_time_minutes * rng.uniform(0.8, 1.2)),
            )

    return len(drafts)
