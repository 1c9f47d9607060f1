# src/taskeru/tasks/task_store.py

from __future__ import annotations

import contextlib
import dataclasses
import json
import logging
import os
import tempfile
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path

from .errors import TaskConflictError, TaskNotFoundError
from .task_models import Task, resolve_now

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Newline-delimited JSON task store.

    One task record per line. Every write goes through the same discipline:
    - write the whole collection to a temp file in the target directory
    - flush + fsync
    - os.replace() over the target (atomic rename)

    Concurrency:
    - `update_with_conflict_check` detects (does not prevent) concurrent edits
      by comparing the stored `updated` value with the caller's snapshot.
    - plain `save` calls from two processes can overwrite each other; there is
      no cross-process lock.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        logger.debug("TaskStore ready path=%s trash=%s", self._path, self.trash_path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def trash_path(self) -> Path:
        # todo.json -> todo.trash.json
        return self._path.with_name(f"{self._path.stem}.trash{self._path.suffix}")

    # ---- low-level helpers ----

    @staticmethod
    def _read_lines(path: Path, *, strict: bool) -> list[Task]:
        tasks: list[Task] = []
        # Bytes in, so an undecodable line fails inside the per-line try.
        with path.open("rb") as fh:
            for line_no, raw in enumerate(fh, start=1):
                raw = raw.strip()
                if not raw:
                    continue
                try:
                    tasks.append(Task.from_record(json.loads(raw)))
                except (ValueError, TypeError, KeyError) as e:
                    if strict:
                        logger.warning(
                            "Skipping malformed task record path=%s line=%d: %s",
                            path,
                            line_no,
                            e,
                        )
                    else:
                        logger.debug("Ignoring malformed trash record line=%d: %s", line_no, e)
        return tasks

    @staticmethod
    def _write_atomic(path: Path, tasks: Iterable[Task], *, prefix: str) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=prefix, suffix=".tmp", dir=path.parent)
        count = 0
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                for task in tasks:
                    fh.write(json.dumps(task.to_record(), ensure_ascii=False))
                    fh.write("\n")
                    count += 1
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
        return count

    # ---- public API ----

    def load(self) -> list[Task]:
        """
        Load every task. A missing file is an empty collection; a malformed
        line is logged and skipped. Other I/O errors propagate.
        """
        try:
            tasks = self._read_lines(self._path, strict=True)
        except FileNotFoundError:
            logger.info("No task file found, starting empty path=%s", self._path)
            return []
        logger.debug("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    def save(self, tasks: Iterable[Task]) -> None:
        count = self._write_atomic(self._path, tasks, prefix=".taskeru-")
        logger.debug("Saved %d tasks to %s", count, self._path)

    def add_task(self, task: Task) -> None:
        self.add_tasks([task])

    def add_tasks(self, new_tasks: Iterable[Task]) -> None:
        tasks = self.load()
        tasks.extend(new_tasks)
        self.save(tasks)

    def get_task(self, task_id: str) -> Task:
        for task in self.load():
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def update_with_conflict_check(
        self,
        task_id: str,
        expected_updated: datetime,
        mutator: Callable[[Task], None],
        *,
        now: datetime | None = None,
    ) -> Task:
        """
        Apply `mutator` to one task if nobody touched it since the caller
        captured `expected_updated`.

        Raises TaskNotFoundError if the id is gone and TaskConflictError if
        the stored `updated` differs; in both cases nothing is written.
        """
        tasks = self.load()
        for task in tasks:
            if task.id != task_id:
                continue
            if task.updated != expected_updated:
                logger.warning(
                    "Conflict on task id=%s stored=%s expected=%s",
                    task_id,
                    task.updated.isoformat(),
                    expected_updated.isoformat(),
                )
                raise TaskConflictError(task_id, expected_updated, task.updated)
            mutator(task)
            task.touch(now)
            self.save(tasks)
            return task
        raise TaskNotFoundError(task_id)

    def load_trash(self) -> list[Task]:
        try:
            return self._read_lines(self.trash_path, strict=False)
        except FileNotFoundError:
            return []

    def save_deleted_to_trash(self, deleted: Iterable[Task], *, now: datetime | None = None) -> None:
        """
        Append deleted tasks to the trash file; `updated` records the deletion
        instant. Existing trash entries are kept (best-effort read).
        """
        deleted = list(deleted)
        if not deleted:
            return

        deleted_at = resolve_now(now)
        existing = self.load_trash()
        stamped = [dataclasses.replace(t, projects=list(t.projects), updated=deleted_at) for t in deleted]

        self._write_atomic(self.trash_path, [*existing, *stamped], prefix=".trash-")
        logger.info("Moved %d task(s) to trash %s", len(stamped), self.trash_path)

    def delete_task(self, task_id: str, *, now: datetime | None = None) -> Task:
        """Remove one task from the collection, recording it in the trash first."""
        tasks = self.load()
        remaining = [t for t in tasks if t.id != task_id]
        deleted = [t for t in tasks if t.id == task_id]
        if not deleted:
            raise TaskNotFoundError(task_id)

        self.save_deleted_to_trash(deleted, now=now)
        self.save(remaining)
        return deleted[0]
