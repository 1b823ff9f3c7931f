"""Configuration models for tasktrack."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Configuration for the local key-value storage file."""

    path: str = ".tasktrack/storage.json"
    key: str = "task-storage"


class TimerConfig(BaseModel):
    """Configuration for timer accounting."""

    commit_on_complete: bool = True
    """Credit a running session's minutes when a task is toggled to completed."""


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: str | None = None


class TrackerConfig(BaseModel):
    """Main configuration for tasktrack."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    timer: TimerConfig = Field(default_factory=TimerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    seed_on_empty: bool = False

    @classmethod
    def load(cls, path: Path | None = None) -> TrackerConfig:
        """Load configuration from file or return defaults."""
        if path is None:
            path = CONFIG_FILE

        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = CONFIG_FILE

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(exclude_none=True), f, indent=2)


# Default config directory
TRACK_DIR = Path(".tasktrack")
CONFIG_FILE = TRACK_DIR / "config.json"
STORAGE_FILE = TRACK_DIR / "storage.json"
