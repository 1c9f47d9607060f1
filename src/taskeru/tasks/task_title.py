# src/taskeru/tasks/task_title.py

"""Split raw task input ("Buy milk +home due:tomorrow") into title, dates and projects."""

from __future__ import annotations

import re
from datetime import datetime

from .date_parser import DateKind, resolve_date
from .task_models import Task, new_task

_PROJECT_AT_END = re.compile(r"(?:\s+|^)\+(\S+)\s*$")
_WHITESPACE = re.compile(r"\s+")

# Multi-word phrase runs until the next tag or the end of the input.
_DUE_PHRASE = re.compile(r"\s+due:([^+]+?)(\s+(?:due:|scheduled:|sched:|\+)|$)")
_DUE_WORD = re.compile(r"\s+due:(\S+)")
_SCHED_PHRASE = re.compile(r"\s+(?:scheduled|sched):([^+]+?)(\s+(?:due:|scheduled:|sched:|\+)|$)")
_SCHED_WORD = re.compile(r"\s+(?:scheduled|sched):(\S+)")


def extract_projects(title: str) -> tuple[str, list[str]]:
    """Strip trailing `+project` tokens; projects are returned in written order."""
    projects: list[str] = []
    clean = title
    while True:
        m = _PROJECT_AT_END.search(clean)
        if m is None:
            break
        projects.insert(0, m.group(1))
        clean = clean[: m.start()]
    return clean.strip(), projects


def _extract_date(
    title: str,
    phrase_re: re.Pattern[str],
    word_re: re.Pattern[str],
    kind: DateKind,
    now: datetime | None,
) -> tuple[str, datetime | None]:
    m = phrase_re.search(title)
    if m is not None:
        resolved = resolve_date(m.group(1).strip(), kind, now)
        if resolved is not None:
            # Keep the following tag marker (e.g. " +work") in place.
            tail = m.group(2) if m.group(2).strip() else ""
            clean = title[: m.start()] + tail + title[m.end() :]
            return _WHITESPACE.sub(" ", clean.strip()), resolved

    m = word_re.search(title)
    if m is None:
        return title, None
    resolved = resolve_date(m.group(1), kind, now)
    if resolved is None:
        return title, None
    return (title[: m.start()] + title[m.end() :]).strip(), resolved


def extract_deadline(title: str, now: datetime | None = None) -> tuple[str, datetime | None]:
    return _extract_date(title, _DUE_PHRASE, _DUE_WORD, DateKind.DEADLINE, now)


def extract_scheduled(title: str, now: datetime | None = None) -> tuple[str, datetime | None]:
    return _extract_date(title, _SCHED_PHRASE, _SCHED_WORD, DateKind.SCHEDULED, now)


def parse_task(raw: str, now: datetime | None = None) -> Task:
    """Build a new TODO task from raw user input."""
    title, scheduled = extract_scheduled(raw.strip(), now)
    title, due = extract_deadline(title, now)
    title, projects = extract_projects(title)

    task = new_task(title, now)
    if projects:
        task.set_projects(projects, now)
    if scheduled is not None:
        task.set_scheduled_date(scheduled, now)
    if due is not None:
        task.set_due_date(due, now)
    return task
