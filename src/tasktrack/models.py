"""Task data models for tasktrack."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Category = Literal["work", "personal", "health", "learning"]
Priority = Literal[1, 2, 3, 4]
TaskStatus = Literal["pending", "in-progress", "completed"]

CATEGORIES: tuple[Category, ...] = ("work", "personal", "health", "learning")
PRIORITIES: tuple[Priority, ...] = (1, 2, 3, 4)
STATUSES: tuple[TaskStatus, ...] = ("pending", "in-progress", "completed")

PRIORITY_LABELS: dict[int, str] = {
    1: "Urgent",
    2: "High",
    3: "Medium",
    4: "Low",
}

CATEGORY_LABELS: dict[str, str] = {
    "work": "Work",
    "personal": "Personal",
    "health": "Health",
    "learning": "Learning",
}

STATUS_LABELS: dict[str, str] = {
    "pending": "To Do",
    "in-progress": "In Progress",
    "completed": "Done",
}

# Next status in the toggle cycle
NEXT_STATUS: dict[str, TaskStatus] = {
    "pending": "in-progress",
    "in-progress": "completed",
    "completed": "pending",
}


def to_local_naive(value: datetime | None) -> datetime | None:
    """Convert an offset-aware datetime to naive local time.

    Stored data may carry UTC stamps such as ``2025-01-15T09:00:00Z``; all
    comparisons here are against the naive local clock.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class TaskDraft(BaseModel):
    """Caller-supplied fields for a new task.

    The title is expected to be trimmed and non-empty; that check belongs to
    whoever collects the input.
    """

    title: str
    description: str = ""
    category: Category = "work"
    priority: Priority = 3
    due_date: datetime | None = None
    status: TaskStatus = "pending"
    estimated_time_minutes: int = Field(default=30, ge=0)

    @field_validator("due_date")
    @classmethod
    def due_date_local(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)


class Task(TaskDraft):
    """A tracked task.

    Timer fields are owned by the store: ``timer_started_at`` is set exactly
    while ``is_timer_running`` is true.
    """

    id: str
    created_at: datetime
    completed_at: datetime | None = None
    actual_time_minutes: int = Field(default=0, ge=0)
    is_timer_running: bool = False
    timer_started_at: datetime | None = None

    @field_validator("created_at", "completed_at", "timer_started_at")
    @classmethod
    def timestamps_local(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)


# Fields the store manages itself and never accepts in a patch
PROTECTED_FIELDS = frozenset({"id", "created_at", "is_timer_running", "timer_started_at"})
