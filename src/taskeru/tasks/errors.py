# src/taskeru/tasks/errors.py

"""Store error taxonomy (I/O errors are plain OSError and propagate as-is)."""

from __future__ import annotations

from datetime import datetime


class TaskStoreError(Exception):
    """Base class for task store failures that are not raw I/O errors."""


class TaskNotFoundError(TaskStoreError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task with ID {task_id} not found")
        self.task_id = task_id


class TaskConflictError(TaskStoreError):
    """The stored task changed after the caller captured its `updated` value."""

    def __init__(self, task_id: str, expected: datetime, actual: datetime) -> None:
        super().__init__(
            f"task {task_id} has been modified by another process "
            f"({actual.isoformat()} != {expected.isoformat()})"
        )
        self.task_id = task_id
        self.expected = expected
        self.actual = actual
