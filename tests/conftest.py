# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskeru.core.state import AppState
from taskeru.tasks.task_models import Task, TaskStatus
from taskeru.tasks.task_store import TaskStore

from .fakes import FakeEditor

TZ = timezone(timedelta(hours=9))

# Tuesday, midday.
NOW = datetime(2025, 6, 10, 12, 0, 0, tzinfo=TZ)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    A SimpleNamespace keeps tests independent of the process environment.
    """
    return SimpleNamespace(
        app_name="taskeru",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        task_file=tmp_path / "todo.json",
        editor="true",
        add_timestamp=False,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.task_file)


@pytest.fixture()
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, editor: FakeEditor) -> AppState:
    return AppState(settings=settings, store=store, note_editor=editor)


@pytest.fixture()
def make_task(now: datetime) -> Callable[..., Task]:
    """Task factory with deterministic ids and timestamps (one minute before NOW)."""

    def _make(task_id: str, title: str = "", **fields) -> Task:
        stamp = fields.pop("stamp", now - timedelta(minutes=1))
        status = fields.pop("status", TaskStatus.TODO)
        task = Task(id=task_id, title=title or f"task {task_id}", created=stamp, updated=stamp, status=status)
        for key, value in fields.items():
            setattr(task, key, value)
        return task

    return _make
