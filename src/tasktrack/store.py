"""Task store - the single owner of the task collection and the active timer.

All mutation goes through ``TaskStore`` methods. Every method is total over
the in-memory collection: an id that doesn't exist is silently ignored.

At most one task runs a timer at a time. ``active_timer_task_id`` mirrors
whichever task has ``is_timer_running`` set, and starting a timer on another
task stops (and credits) the running one first.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from tasktrack.config import TrackerConfig
from tasktrack.models import (
    NEXT_STATUS,
    PROTECTED_FIELDS,
    Category,
    Priority,
    Task,
    TaskDraft,
    TaskStatus,
)
from tasktrack.storage import DEFAULT_KEY, LocalStorage, load_tasks, save_tasks
from tasktrack.timeutil import day_window

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def elapsed_minutes(started_at: datetime, now: datetime) -> int:
    """Whole minutes between two moments, halves rounded up, never negative."""
    seconds = (now - started_at).total_seconds()
    return max(0, math.floor(seconds / 60 + 0.5))


class TaskStore:
    """In-memory task collection with optional persistence.

    Args:
        storage: Where to persist tasks; None keeps everything in memory
        key: Storage key the collection lives under
        clock: Source of "now"; defaults to ``datetime.now``
        id_factory: Generator for new task ids
        commit_timer_on_complete: When a running task is toggled to
            completed, credit the open session before closing it
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        *,
        key: str = DEFAULT_KEY,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        commit_timer_on_complete: bool = True,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock or datetime.now
        self._id_factory = id_factory or _new_id
        self.commit_timer_on_complete = commit_timer_on_complete

        self._tasks: list[Task] = []
        self._active_timer_task_id: str | None = None

        if storage is not None:
            self.reload()

    @classmethod
    def from_config(
        cls,
        config: TrackerConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> TaskStore:
        """Build a store backed by the storage file named in ``config``."""
        return cls(
            LocalStorage(Path(config.storage.path)),
            key=config.storage.key,
            clock=clock,
            commit_timer_on_complete=config.timer.commit_on_complete,
        )

    # State access

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of all tasks in insertion order."""
        return tuple(self._tasks)

    @property
    def active_timer_task_id(self) -> str | None:
        return self._active_timer_task_id

    def now(self) -> datetime:
        return self._clock()

    def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        index = self._index(task_id)
        return self._tasks[index] if index is not None else None

    def _index(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    # Persistence

    def reload(self) -> None:
        """Replace the in-memory collection with what storage holds."""
        if self._storage is None:
            return

        tasks = load_tasks(self._storage, self._key)
        active: str | None = None

        for i, task in enumerate(tasks):
            running = task.is_timer_running and task.timer_started_at is not None
            if running and active is None:
                active = task.id
                continue
            if task.is_timer_running or task.timer_started_at is not None:
                logger.warning("Clearing stale timer on task %s", task.id)
                tasks[i] = task.model_copy(
                    update={"is_timer_running": False, "timer_started_at": None}
                )

        self._tasks = tasks
        self._active_timer_task_id = active
        logger.debug("Loaded %d task(s), active timer: %s", len(tasks), active)

    def _persist(self) -> None:
        if self._storage is not None:
            save_tasks(self._storage, self._tasks, self._key)

    # Mutations

    def add(self, draft: TaskDraft) -> Task:
        """Create a task from caller-supplied fields and append it."""
        now = self.now()

        task_id = self._id_factory()
        while self._index(task_id) is not None:
            task_id = self._id_factory()

        task = Task(
            **draft.model_dump(),
            id=task_id,
            created_at=now,
            completed_at=now if draft.status == "completed" else None,
        )
        self._tasks.append(task)
        self._persist()

        logger.debug("Added task %s", task.id)
        return task

    def update(self, task_id: str, **changes: Any) -> None:
        """Merge ``changes`` into a task.

        ``id``, ``created_at`` and the timer fields can't be patched; use
        ``start_timer``/``stop_timer`` for the timer. A status change keeps
        ``completed_at`` and the timer consistent with the new status.
        """
        index = self._index(task_id)
        if index is None:
            logger.debug("update: no task %s", task_id)
            return

        ignored = PROTECTED_FIELDS.intersection(changes)
        if ignored:
            logger.debug("update: ignoring protected field(s) %s", sorted(ignored))
        patch = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}

        current = self._tasks[index]
        merged = Task.model_validate({**current.model_dump(), **patch})

        if merged.status == "completed":
            if merged.is_timer_running:
                merged = self._close_timer(merged, commit=self.commit_timer_on_complete)
            if merged.completed_at is None:
                merged = merged.model_copy(update={"completed_at": self.now()})
        elif merged.completed_at is not None:
            merged = merged.model_copy(update={"completed_at": None})

        self._tasks[index] = merged
        self._persist()

    def delete(self, task_id: str) -> None:
        """Remove a task, releasing the active timer if it held it."""
        index = self._index(task_id)
        if index is None:
            logger.debug("delete: no task %s", task_id)
            return

        del self._tasks[index]
        if self._active_timer_task_id == task_id:
            self._active_timer_task_id = None

        self._persist()
        logger.debug("Deleted task %s", task_id)

    def toggle_status(self, task_id: str) -> None:
        """Advance a task along pending -> in-progress -> completed -> pending."""
        index = self._index(task_id)
        if index is None:
            logger.debug("toggle_status: no task %s", task_id)
            return

        task = self._tasks[index]
        new_status = NEXT_STATUS[task.status]

        if new_status == "completed":
            if task.is_timer_running:
                task = self._close_timer(task, commit=self.commit_timer_on_complete)
            task = task.model_copy(update={"status": new_status, "completed_at": self.now()})
        else:
            task = task.model_copy(update={"status": new_status, "completed_at": None})

        self._tasks[index] = task
        self._persist()

    def start_timer(self, task_id: str) -> None:
        """Start timing a task, stopping any other running timer first.

        Starting a timer puts the task in progress, reopening it if it was
        completed. Starting the timer that's already running does nothing.
        """
        index = self._index(task_id)
        if index is None:
            logger.debug("start_timer: no task %s", task_id)
            return

        task = self._tasks[index]
        if task.is_timer_running:
            return

        if self._active_timer_task_id is not None:
            self.stop_timer(self._active_timer_task_id)

        self._tasks[index] = task.model_copy(
            update={
                "is_timer_running": True,
                "timer_started_at": self.now(),
                "status": "in-progress",
                "completed_at": None,
            }
        )
        self._active_timer_task_id = task_id
        self._persist()

        logger.debug("Timer started on task %s", task_id)

    def stop_timer(self, task_id: str) -> None:
        """Stop a task's timer and credit the elapsed minutes."""
        index = self._index(task_id)
        if index is None or self._tasks[index].timer_started_at is None:
            return

        self._tasks[index] = self._close_timer(self._tasks[index], commit=True)
        self._persist()

    def _close_timer(self, task: Task, *, commit: bool) -> Task:
        """Return ``task`` with its timer session closed."""
        minutes = 0
        if commit and task.timer_started_at is not None:
            minutes = elapsed_minutes(task.timer_started_at, self.now())

        if self._active_timer_task_id == task.id:
            self._active_timer_task_id = None

        logger.debug("Timer stopped on task %s, +%d min", task.id, minutes)
        return task.model_copy(
            update={
                "is_timer_running": False,
                "timer_started_at": None,
                "actual_time_minutes": task.actual_time_minutes + minutes,
            }
        )

    def elapsed_seconds(self, task_id: str) -> int:
        """Seconds since the task's timer started, or 0 if it isn't running.

        A read-only view for live displays; nothing is credited.
        """
        task = self.get(task_id)
        if task is None or task.timer_started_at is None:
            return 0
        return max(0, int((self.now() - task.timer_started_at).total_seconds()))

    # Derived accessors

    def tasks_by_status(self, status: TaskStatus) -> list[Task]:
        return [t for t in self._tasks if t.status == status]

    def tasks_by_category(self, category: Category) -> list[Task]:
        return [t for t in self._tasks if t.category == category]

    def tasks_by_priority(self, priority: Priority) -> list[Task]:
        return [t for t in self._tasks if t.priority == priority]

    def today_tasks(self) -> list[Task]:
        """Tasks due at any time today."""
        start, end = day_window(self.now())
        return [
            t for t in self._tasks
            if t.due_date is not None and start <= t.due_date < end
        ]

    def completed_tasks(self) -> list[Task]:
        return self.tasks_by_status("completed")
