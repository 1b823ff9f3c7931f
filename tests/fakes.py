"""Test doubles and builders shared across tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from tasktrack.models import Task

# Wednesday morning
FIXED_NOW = datetime(2025, 1, 15, 10, 0, 0)


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_task(**overrides: Any) -> Task:
    """Build a task with sensible defaults for view tests."""
    fields: dict[str, Any] = {
        "id": "t1",
        "title": "Task",
        "category": "work",
        "priority": 3,
        "status": "pending",
        "estimated_time_minutes": 30,
        "created_at": FIXED_NOW - timedelta(days=1),
    }
    fields.update(overrides)
    if fields["status"] == "completed" and "completed_at" not in fields:
        fields["completed_at"] = FIXED_NOW
    return Task(**fields)
