# src/taskeru/tasks/task_view.py

"""
Sort / filter / search over a task list: what the user actually sees.

All functions are pure: they never mutate the tasks they are given, and
`sort_tasks` returns a new list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from .task_models import Task, is_valid_priority

# Unset priority sorts between C (2) and D (3).
UNSET_PRIORITY_VALUE = 2.5
INVALID_PRIORITY_VALUE = 100.0


def priority_value(priority: str) -> float:
    if priority == "":
        return UNSET_PRIORITY_VALUE
    if is_valid_priority(priority):
        return float(ord(priority) - ord("A"))
    return INVALID_PRIORITY_VALUE


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """
    Canonical display order:
      1. active before completed (DONE/WONTDO)
      2. priority A..Z, unset between C and D
      3. updated, newest first
      4. id, descending
    """
    ordered = list(tasks)
    # Stable sorts applied from the least to the most significant key.
    ordered.sort(key=lambda t: t.id, reverse=True)
    ordered.sort(key=lambda t: t.updated, reverse=True)
    ordered.sort(key=lambda t: (t.is_completed, priority_value(t.priority)))
    return ordered


def filter_visible(tasks: Iterable[Task], show_all: bool = False, now: datetime | None = None) -> list[Task]:
    """Hide tasks completed before the most recent 4 AM boundary unless `show_all`."""
    if show_all:
        return list(tasks)
    return [t for t in tasks if not t.is_old_completed(now)]


def filter_by_project(tasks: Iterable[Task], project: str) -> list[Task]:
    if not project:
        return list(tasks)
    return [t for t in tasks if project in t.projects]


def all_projects(tasks: Iterable[Task]) -> list[str]:
    """Distinct projects in first-seen order."""
    seen: dict[str, None] = {}
    for task in tasks:
        for project in task.projects:
            seen.setdefault(project, None)
    return list(seen)


def apply_view(
    tasks: Iterable[Task],
    *,
    project: str = "",
    show_all: bool = False,
    now: datetime | None = None,
) -> list[Task]:
    """Sort, then project filter, then visibility filter."""
    return filter_visible(filter_by_project(sort_tasks(tasks), project), show_all, now)


def task_matches(task: Task, query: str) -> bool:
    q = query.lower()
    if q in task.title.lower() or q in task.note.lower():
        return True
    return any(q in p.lower() for p in task.projects)


def match_ids(tasks: Iterable[Task], query: str) -> set[str]:
    if not query:
        return set()
    return {t.id for t in tasks if task_matches(t, query)}


def first_match(tasks: Sequence[Task], matches: set[str]) -> int | None:
    for i, task in enumerate(tasks):
        if task.id in matches:
            return i
    return None


def next_match(tasks: Sequence[Task], matches: set[str], cursor: int) -> int | None:
    """Index of the next match after `cursor`, wrapping to the top."""
    n = len(tasks)
    for step in range(1, n + 1):
        i = (cursor + step) % n
        if tasks[i].id in matches:
            return i
    return None


def prev_match(tasks: Sequence[Task], matches: set[str], cursor: int) -> int | None:
    """Index of the previous match before `cursor`, wrapping to the bottom."""
    n = len(tasks)
    for step in range(1, n + 1):
        i = (cursor - step) % n
        if tasks[i].id in matches:
            return i
    return None
