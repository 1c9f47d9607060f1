# src/taskeru/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from dateutil import parser as date_parser

# Completed tasks stay visible until this hour of the following day.
DAY_BOUNDARY_HOUR = 4


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - DONE and WONTDO are terminal: they carry a completion timestamp.
    - Declaration order is the order used when cycling statuses.
    """

    TODO = "TODO"
    DOING = "DOING"
    WAITING = "WAITING"
    DONE = "DONE"
    WONTDO = "WONTDO"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.DONE, TaskStatus.WONTDO)

    @classmethod
    def parse(cls, raw: Any) -> TaskStatus | None:
        if isinstance(raw, TaskStatus):
            return raw
        try:
            return cls(str(raw))
        except ValueError:
            return None

    @classmethod
    def from_record(cls, raw: str | None) -> TaskStatus:
        return cls.parse(raw) or cls.TODO


ALL_STATUSES: tuple[TaskStatus, ...] = tuple(TaskStatus)


def local_now() -> datetime:
    return datetime.now().astimezone()


def resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return local_now()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def end_of_day(moment: datetime) -> datetime:
    """Deadline normalization: 23:59:59 on the same local date."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=0)


def start_of_day(moment: datetime) -> datetime:
    """Scheduled-date normalization: 00:00:00 on the same local date."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def day_boundary(now: datetime | None = None) -> datetime:
    """
    Most recent 4 AM boundary.

    Before 4 AM the boundary is yesterday's 4 AM, so work finished late at
    night still counts as "today".
    """
    now = resolve_now(now)
    boundary = now.replace(hour=DAY_BOUNDARY_HOUR, minute=0, second=0, microsecond=0)
    if now < boundary:
        boundary -= timedelta(days=1)
    return boundary


def is_valid_priority(priority: str) -> bool:
    return priority == "" or (len(priority) == 1 and "A" <= priority <= "Z")


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created: datetime
    updated: datetime
    status: TaskStatus = TaskStatus.TODO
    priority: str = ""
    completed_at: datetime | None = None
    due_date: datetime | None = None
    scheduled_date: datetime | None = None
    note: str = ""
    projects: list[str] = field(default_factory=list)

    # ---- mutators (every one of them bumps `updated`) ----

    def touch(self, now: datetime | None = None) -> None:
        now = resolve_now(now)
        if now > self.updated:
            self.updated = now

    def set_title(self, title: str, now: datetime | None = None) -> None:
        self.title = title
        self.touch(now)

    def set_note(self, note: str, now: datetime | None = None) -> None:
        self.note = note
        self.touch(now)

    def set_projects(self, projects: list[str], now: datetime | None = None) -> None:
        self.projects = list(dict.fromkeys(p for p in projects if p))
        self.touch(now)

    def set_priority(self, priority: str, now: datetime | None = None) -> None:
        """Accept a single letter A-Z or the empty string; anything else is ignored."""
        if not isinstance(priority, str) or not is_valid_priority(priority):
            return
        self.priority = priority
        self.touch(now)

    def increase_priority(self, now: datetime | None = None) -> None:
        # A is the highest priority.
        if self.priority == "":
            self.priority = "C"
        elif self.priority > "A":
            self.priority = chr(ord(self.priority) - 1)
        self.touch(now)

    def decrease_priority(self, now: datetime | None = None) -> None:
        if self.priority == "":
            self.priority = "D"
        elif self.priority < "Z":
            self.priority = chr(ord(self.priority) + 1)
        self.touch(now)

    def set_status(self, status: TaskStatus | str, now: datetime | None = None) -> None:
        new_status = TaskStatus.parse(status)
        if new_status is None:
            return

        now = resolve_now(now)
        was_terminal = self.status.is_terminal
        self.status = new_status
        self.touch(now)

        if new_status.is_terminal and not was_terminal:
            self.completed_at = now
        elif not new_status.is_terminal:
            self.completed_at = None

    def set_due_date(self, due: datetime | None, now: datetime | None = None) -> None:
        self.due_date = end_of_day(resolve_now(due)) if due is not None else None
        self.touch(now)

    def set_scheduled_date(self, scheduled: datetime | None, now: datetime | None = None) -> None:
        self.scheduled_date = start_of_day(resolve_now(scheduled)) if scheduled is not None else None
        self.touch(now)

    # ---- queries ----

    @property
    def is_completed(self) -> bool:
        return self.status.is_terminal

    def is_old_completed(self, now: datetime | None = None) -> bool:
        if not self.is_completed or self.completed_at is None:
            return False
        return self.completed_at < day_boundary(now)

    def is_future_scheduled(self, now: datetime | None = None) -> bool:
        if self.scheduled_date is None:
            return False
        return self.scheduled_date > start_of_day(resolve_now(now))

    def display_priority(self) -> str:
        return f"[{self.priority}]" if self.priority else "   "

    def summary(self) -> str:
        parts = [self.title]
        if self.projects:
            parts.append(f"[Projects: {', '.join(self.projects)}]")
        if self.scheduled_date is not None:
            parts.append(f"[Scheduled: {self.scheduled_date:%Y-%m-%d}]")
        if self.due_date is not None:
            parts.append(f"[Due: {self.due_date:%Y-%m-%d}]")
        return " ".join(parts)

    # ---- record codec ----

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
        }
        if self.completed_at is not None:
            rec["completed_at"] = self.completed_at.isoformat()
        if self.due_date is not None:
            rec["due_date"] = self.due_date.isoformat()
        if self.scheduled_date is not None:
            rec["scheduled_date"] = self.scheduled_date.isoformat()
        if self.priority:
            rec["priority"] = self.priority
        rec["status"] = self.status.value
        if self.note:
            rec["note"] = self.note
        if self.projects:
            rec["projects"] = list(self.projects)
        return rec

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Task:
        """
        Build a Task from one decoded JSON record.

        Raises ValueError/TypeError/KeyError on records that cannot be
        interpreted; legacy records without `updated` get `created`.
        """
        if not isinstance(rec, dict):
            raise TypeError(f"task record must be an object, got {type(rec).__name__}")

        task_id = rec["id"]
        if not isinstance(task_id, str) or not task_id:
            raise ValueError("task record has no id")

        created = _parse_ts(rec.get("created"))
        if created is None:
            raise ValueError(f"task {task_id} has no created timestamp")
        updated = _parse_ts(rec.get("updated"))
        if updated is None or updated.year <= 1:
            # Older files carry no (or a zero) update time.
            updated = created

        priority = rec.get("priority") or ""
        if not isinstance(priority, str) or not is_valid_priority(priority):
            priority = ""

        projects = rec.get("projects") or []
        if not isinstance(projects, list):
            raise TypeError(f"task {task_id} has malformed projects")

        return cls(
            id=task_id,
            title=str(rec.get("title") or ""),
            created=created,
            updated=updated,
            status=TaskStatus.from_record(rec.get("status")),
            priority=priority,
            completed_at=_parse_ts(rec.get("completed_at")),
            due_date=_parse_ts(rec.get("due_date")),
            scheduled_date=_parse_ts(rec.get("scheduled_date")),
            note=str(rec.get("note") or ""),
            projects=[str(p) for p in projects],
        )


def _parse_ts(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise TypeError(f"timestamp must be a string, got {type(raw).__name__}")
    # isoparse keeps working on nanosecond-precision and "Z"-suffixed values.
    ts = date_parser.isoparse(raw)
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts


def new_task(title: str, now: datetime | None = None) -> Task:
    """Factory: stamps id/created/updated, status TODO."""
    now = resolve_now(now)
    return Task(id=str(uuid.uuid4()), title=title, created=now, updated=now)
