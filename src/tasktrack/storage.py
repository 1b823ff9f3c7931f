"""Local key-value storage and the persisted task schema.

The storage file is a single JSON object mapping keys to payloads, in the
manner of a browser's local storage. The task store keeps its collection
under one fixed key as a versioned document::

    {"task-storage": {"version": 1, "state": {"tasks": [...]}}}

Datetimes are written as ISO 8601 strings and parsed back on load.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from tasktrack.config import STORAGE_FILE
from tasktrack.models import Task

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DEFAULT_KEY = "task-storage"


class PersistedState(BaseModel):
    """The part of the store's state that is written to disk."""

    tasks: list[Task] = Field(default_factory=list)


class PersistedDocument(BaseModel):
    """Versioned envelope around the persisted state."""

    version: int = SCHEMA_VERSION
    state: PersistedState = Field(default_factory=PersistedState)


class LocalStorage:
    """A JSON file used as a key-value store.

    Reads tolerate a missing or unreadable file by treating it as empty.
    Writes replace the whole file atomically.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else STORAGE_FILE

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: top level is not an object", self.path)
            return {}
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Any | None:
        """Return the payload stored under ``key``, or None."""
        return self._read_all().get(key)

    def set_item(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable payload under ``key``."""
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def dump_tasks(tasks: list[Task]) -> dict[str, Any]:
    """Serialise tasks into a versioned, JSON-ready document."""
    document = PersistedDocument(state=PersistedState(tasks=tasks))
    return document.model_dump(mode="json")


def parse_tasks(payload: Any) -> list[Task]:
    """Rebuild tasks from a stored document.

    Anything that is missing, from another schema version, or fails
    validation yields an empty list.
    """
    if payload is None:
        return []

    if not isinstance(payload, dict):
        logger.warning("Discarding stored tasks: payload is not an object")
        return []

    version = payload.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        logger.warning("Discarding stored tasks: unsupported schema version %r", version)
        return []

    try:
        document = PersistedDocument.model_validate(payload)
    except ValidationError as e:
        logger.warning("Discarding stored tasks: %d validation error(s)", e.error_count())
        return []

    return document.state.tasks


def load_tasks(storage: LocalStorage, key: str = DEFAULT_KEY) -> list[Task]:
    """Load the task collection stored under ``key``."""
    return parse_tasks(storage.get_item(key))


def save_tasks(storage: LocalStorage, tasks: list[Task], key: str = DEFAULT_KEY) -> None:
    """Persist the task collection under ``key``."""
    storage.set_item(key, dump_tasks(tasks))
