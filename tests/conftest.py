"""Shared fixtures for tasktrack tests."""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from tasktrack.storage import LocalStorage
from tasktrack.store import TaskStore

from .fakes import FakeClock


@pytest.fixture
def temp_project(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory and change to it."""
    original_dir = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_dir)


@pytest.fixture
def temp_track_dir(temp_project: Path) -> Path:
    """Create a temporary .tasktrack directory."""
    track_dir = temp_project / ".tasktrack"
    track_dir.mkdir()
    return track_dir


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> TaskStore:
    """An in-memory store on the fake clock."""
    return TaskStore(clock=clock)


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def persistent_store(storage: LocalStorage, clock: FakeClock) -> TaskStore:
    """A store that writes through to a temporary storage file."""
    return TaskStore(storage, clock=clock)
