# src/taskeru/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the session driver and CLI commands.

They depend on Protocols instead of concrete implementations, so the file
store, the external editor and the terminal can be replaced in tests.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from ..tasks.task_models import Task

if TYPE_CHECKING:
    from ..interactive.controller import SessionController, SessionResult
    from ..tasks.note_editor import EditedNote


class TaskRepo(Protocol):
    def load(self) -> list[Task]: ...
    def save(self, tasks: Iterable[Task]) -> None: ...
    def add_task(self, task: Task) -> None: ...
    def get_task(self, task_id: str) -> Task: ...

    def update_with_conflict_check(
            self,
            task_id: str,
            expected_updated: datetime,
            mutator: Callable[[Task], None],
            *,
            now: datetime | None = None,
    ) -> Task: ...

    def save_deleted_to_trash(self, deleted: Iterable[Task], *, now: datetime | None = None) -> None: ...
    def delete_task(self, task_id: str, *, now: datetime | None = None) -> Task: ...


class NoteEditor(Protocol):
    """Runs an external editor on a task; raises EditorError on failure."""
    def __call__(self, task: Task, *, editor: str, add_timestamp: bool = False) -> EditedNote: ...


class Terminal(Protocol):
    """Feeds key events into a controller until it finishes."""
    def run(self, controller: SessionController) -> SessionResult: ...
