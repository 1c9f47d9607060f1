# tests/test_task_title.py

from __future__ import annotations

from datetime import datetime

from taskeru.tasks.task_models import TaskStatus
from taskeru.tasks.task_store import TaskStore
from taskeru.tasks.task_title import extract_deadline, extract_projects, extract_scheduled, parse_task
from taskeru.tasks.task_view import filter_visible, sort_tasks

from .conftest import TZ


def test_extract_projects_from_the_end() -> None:
    assert extract_projects("Fix bug +work +urgent") == ("Fix bug", ["work", "urgent"])
    assert extract_projects("C++ tutorial") == ("C++ tutorial", [])
    assert extract_projects("+solo") == ("", ["solo"])


def test_extract_deadline_single_and_multi_word(now: datetime) -> None:
    title, due = extract_deadline("Pay rent due:tomorrow", now)
    assert title == "Pay rent"
    assert due == datetime(2025, 6, 11, 23, 59, 59, tzinfo=TZ)

    title, due = extract_deadline("Pay rent due:in 3 days +home", now)
    assert title == "Pay rent +home"
    assert due == datetime(2025, 6, 13, 23, 59, 59, tzinfo=TZ)


def test_extract_deadline_unparseable_keeps_title(now: datetime) -> None:
    assert extract_deadline("Think due:whenever", now) == ("Think due:whenever", None)


def test_extract_scheduled_aliases(now: datetime) -> None:
    title, when = extract_scheduled("Gym sched:friday", now)
    assert title == "Gym"
    assert when == datetime(2025, 6, 13, 0, 0, 0, tzinfo=TZ)

    title, when = extract_scheduled("Gym scheduled:2025-07-01", now)
    assert title == "Gym"
    assert when == datetime(2025, 7, 1, 0, 0, 0, tzinfo=TZ)


def test_parse_task_all_tags(now: datetime) -> None:
    task = parse_task("Report scheduled:monday due:friday +work +q3", now)
    assert task.title == "Report"
    assert task.projects == ["work", "q3"]
    assert task.scheduled_date == datetime(2025, 6, 16, 0, 0, 0, tzinfo=TZ)
    assert task.due_date == datetime(2025, 6, 13, 23, 59, 59, tzinfo=TZ)


def test_buy_milk_end_to_end(tmp_path, now: datetime) -> None:
    store = TaskStore(tmp_path / "todo.json")
    assert store.load() == []

    store.add_task(parse_task("Buy milk +home due:tomorrow", now))

    (stored,) = store.load()
    assert stored.title == "Buy milk"
    assert stored.projects == ["home"]
    assert stored.due_date == datetime(2025, 6, 11, 23, 59, 59, tzinfo=TZ)
    assert stored.status is TaskStatus.TODO
    assert sort_tasks([stored]) == [stored]
    assert filter_visible([stored], now=now) == [stored]
