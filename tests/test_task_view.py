# tests/test_task_view.py

from __future__ import annotations

from datetime import datetime, timedelta

from taskeru.tasks.task_models import TaskStatus
from taskeru.tasks.task_view import (
    all_projects,
    apply_view,
    filter_by_project,
    filter_visible,
    first_match,
    match_ids,
    next_match,
    prev_match,
    priority_value,
    sort_tasks,
)

from .conftest import TZ


def test_priority_values() -> None:
    assert priority_value("A") == 0
    assert priority_value("C") == 2
    assert priority_value("") == 2.5
    assert priority_value("??") == 100


def test_priority_c_sorts_before_unset(make_task) -> None:
    a = make_task("a")
    b = make_task("b", priority="C")
    assert [t.id for t in sort_tasks([a, b])] == ["b", "a"]


def test_completed_always_last(make_task) -> None:
    done = make_task("done", status=TaskStatus.DONE, priority="A")
    todo = make_task("todo", priority="Z")
    assert [t.id for t in sort_tasks([done, todo])] == ["todo", "done"]


def test_ties_break_on_updated_then_id(make_task, now: datetime) -> None:
    old = make_task("old", stamp=now - timedelta(days=1))
    new = make_task("new", stamp=now)
    x = make_task("x", stamp=now - timedelta(hours=1))
    y = make_task("y", stamp=now - timedelta(hours=1))
    assert [t.id for t in sort_tasks([old, x, new, y])] == ["new", "y", "x", "old"]


def test_sort_does_not_mutate_input(make_task) -> None:
    tasks = [make_task("a"), make_task("b", priority="A")]
    sort_tasks(tasks)
    assert [t.id for t in tasks] == ["a", "b"]


def test_visibility_boundary(make_task) -> None:
    done_at = datetime(2025, 6, 10, 3, 59, tzinfo=TZ)
    task = make_task("late", status=TaskStatus.DONE, completed_at=done_at)

    assert filter_visible([task], now=datetime(2025, 6, 10, 3, 50, tzinfo=TZ)) == [task]
    assert filter_visible([task], now=datetime(2025, 6, 10, 4, 5, tzinfo=TZ)) == []
    assert filter_visible([task], show_all=True, now=datetime(2025, 6, 10, 4, 5, tzinfo=TZ)) == [task]


def test_project_filter_and_listing(make_task) -> None:
    a = make_task("a", projects=["work", "home"])
    b = make_task("b", projects=["home"])
    c = make_task("c")
    assert filter_by_project([a, b, c], "home") == [a, b]
    assert filter_by_project([a, b, c], "") == [a, b, c]
    assert all_projects([a, b, c]) == ["work", "home"]


def test_apply_view_sorts_then_filters(make_task, now: datetime) -> None:
    a = make_task("a", projects=["work"])
    b = make_task("b", projects=["work"], priority="A")
    old = make_task("old", projects=["work"], status=TaskStatus.DONE, completed_at=now - timedelta(days=2))
    other = make_task("other", projects=["home"])
    assert [t.id for t in apply_view([a, old, other, b], project="work", now=now)] == ["b", "a"]


def test_search_matches_title_note_and_projects(make_task) -> None:
    a = make_task("a", title="Buy Milk")
    b = make_task("b", note="call the MILKman")
    c = make_task("c", projects=["milkrun"])
    d = make_task("d", title="unrelated")
    assert match_ids([a, b, c, d], "milk") == {"a", "b", "c"}
    assert match_ids([a, b, c, d], "") == set()


def test_match_navigation_wraps(make_task) -> None:
    tasks = [make_task(str(i)) for i in range(5)]
    matches = {"1", "3"}
    assert first_match(tasks, matches) == 1
    assert next_match(tasks, matches, 1) == 3
    assert next_match(tasks, matches, 3) == 1
    assert prev_match(tasks, matches, 1) == 3
    assert prev_match(tasks, matches, 4) == 3
    assert next_match(tasks, set(), 0) is None
    assert first_match([], matches) is None
