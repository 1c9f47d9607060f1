# tests/test_controller.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from taskeru.interactive.controller import SessionController, SessionIntent
from taskeru.interactive.modes import Browse, CreateInput, DateEdit, DeleteConfirm, ProjectSelect, Search
from taskeru.interactive.render import render_lines
from taskeru.tasks.date_parser import DateKind
from taskeru.tasks.task_models import TaskStatus

from .conftest import TZ


def press(ctl: SessionController, *keys: str) -> None:
    for key in keys:
        ctl.handle_key(key)


def type_text(ctl: SessionController, text: str) -> None:
    press(ctl, *("space" if ch == " " else ch for ch in text))


@pytest.fixture()
def three(make_task):
    """Three tasks whose display order is fixed by priority: a, b, c."""
    return [
        make_task("a", title="alpha", priority="A"),
        make_task("b", title="milk", priority="B", projects=["home"]),
        make_task("c", title="mint tea", priority="C", projects=["work"]),
    ]


@pytest.fixture()
def ctl(three, now: datetime) -> SessionController:
    return SessionController(three, clock=lambda: now)


def ids(ctl: SessionController) -> list[str]:
    return [t.id for t in ctl.visible]


def test_initial_order_and_navigation(ctl: SessionController) -> None:
    assert ids(ctl) == ["a", "b", "c"]
    assert ctl.cursor == 0

    press(ctl, "j", "down", "down")
    assert ctl.cursor == 2
    press(ctl, "k")
    assert ctl.current.id == "b"
    press(ctl, "g")
    assert ctl.cursor == 0
    press(ctl, "up")
    assert ctl.cursor == 0
    press(ctl, "G")
    assert ctl.cursor == 2


def test_toggle_done_cursor_follows_task(ctl: SessionController, now: datetime) -> None:
    press(ctl, "space")

    assert ids(ctl) == ["b", "c", "a"]
    assert ctl.current.id == "a"
    assert ctl.current.status is TaskStatus.DONE
    assert ctl.current.completed_at == now
    assert ctl.modified

    press(ctl, "space")
    assert ids(ctl) == ["a", "b", "c"]
    assert ctl.current.id == "a"
    assert ctl.current.status is TaskStatus.TODO


def test_status_cycle(ctl: SessionController) -> None:
    seen = []
    for _ in range(5):
        press(ctl, "s")
        seen.append(ctl.current.status)
    assert seen == [
        TaskStatus.DOING,
        TaskStatus.WAITING,
        TaskStatus.DONE,
        TaskStatus.WONTDO,
        TaskStatus.TODO,
    ]
    assert ctl.current.id == "a"


def test_priority_change_reorders_and_follows(ctl: SessionController) -> None:
    press(ctl, "G", "+", "+")

    # c is now A with a newer `updated` than a, so it leads.
    assert ids(ctl) == ["c", "a", "b"]
    assert ctl.current.id == "c"
    assert ctl.current.priority == "A"

    press(ctl, "-", "-", "-")
    assert ctl.current.priority == "D"
    assert ids(ctl)[-1] == "c"
    assert ctl.current.id == "c"


def test_delete_confirm_flow(ctl: SessionController) -> None:
    press(ctl, "G", "d")
    assert isinstance(ctl.mode, DeleteConfirm)

    press(ctl, "x", "j")
    assert isinstance(ctl.mode, DeleteConfirm)

    press(ctl, "n")
    assert isinstance(ctl.mode, Browse)
    assert ids(ctl) == ["a", "b", "c"]

    press(ctl, "d", "esc")
    assert isinstance(ctl.mode, Browse)
    assert not ctl.done

    press(ctl, "d", "y")
    assert ids(ctl) == ["a", "b"]
    # deleted task was last: cursor clamps to the new end
    assert ctl.cursor == 1
    assert ctl.modified

    result = ctl.result()
    assert result.deleted_ids == ["c"]
    assert [t.id for t in result.tasks] == ["a", "b"]


def test_search_keeps_query_and_navigates(ctl: SessionController) -> None:
    press(ctl, "/")
    assert isinstance(ctl.mode, Search)

    press(ctl, "m")
    # first typed character jumps to the first match
    assert ctl.cursor == 1
    assert ctl.matches == {"b", "c"}

    press(ctl, "enter")
    assert isinstance(ctl.mode, Browse)
    assert ctl.query == "m"

    press(ctl, "n")
    assert ctl.current.id == "c"
    press(ctl, "n")
    assert ctl.current.id == "b"
    press(ctl, "N")
    assert ctl.current.id == "c"

    press(ctl, "esc")
    assert ctl.query == ""
    assert ctl.matches == set()
    assert not ctl.done

    press(ctl, "esc")
    assert ctl.done
    assert ctl.result().intent is SessionIntent.QUIT


def test_search_escape_keeps_highlights(ctl: SessionController) -> None:
    press(ctl, "/")
    type_text(ctl, "tea")
    press(ctl, "esc")
    assert isinstance(ctl.mode, Browse)
    assert ctl.matches == {"c"}

    press(ctl, "g", "n")
    assert ctl.current.id == "c"


def test_next_match_without_hits_keeps_cursor(ctl: SessionController) -> None:
    press(ctl, "/")
    type_text(ctl, "zzz")
    press(ctl, "enter", "j", "n")
    assert ctl.cursor == 1


def test_date_edit_commit_prefill_and_cancel(ctl: SessionController) -> None:
    press(ctl, "D")
    assert isinstance(ctl.mode, DateEdit)
    assert ctl.mode.kind is DateKind.DEADLINE
    assert ctl.mode.buffer.text == ""

    type_text(ctl, "tomorrow")
    press(ctl, "enter")
    assert ctl.current.due_date == datetime(2025, 6, 11, 23, 59, 59, tzinfo=TZ)
    assert ctl.modified

    press(ctl, "D")
    assert ctl.mode.buffer.text == "2025-06-11"
    type_text(ctl, "x")
    press(ctl, "esc")
    assert ctl.current.due_date == datetime(2025, 6, 11, 23, 59, 59, tzinfo=TZ)

    press(ctl, "S")
    type_text(ctl, "in 6 days")
    press(ctl, "enter")
    assert ctl.current.scheduled_date == datetime(2025, 6, 16, 0, 0, 0, tzinfo=TZ)


def test_date_edit_unparseable_or_empty_clears(ctl: SessionController) -> None:
    press(ctl, "D")
    type_text(ctl, "friday")
    press(ctl, "enter")
    assert ctl.current.due_date is not None

    press(ctl, "D", "ctrl+a", "ctrl+k")
    press(ctl, *["delete"] * 10)
    type_text(ctl, "someday maybe")
    press(ctl, "enter")
    assert ctl.current.due_date is None


def test_project_select(ctl: SessionController) -> None:
    press(ctl, "p")
    assert isinstance(ctl.mode, ProjectSelect)
    assert ctl.mode.projects == ["home", "work"]
    assert ctl.mode.cursor == 0
    assert ctl.project_choices() == [("", 3), ("home", 1), ("work", 1)]

    press(ctl, "j", "j", "j", "enter")
    assert ctl.project_filter == "work"
    assert ids(ctl) == ["c"]
    assert ctl.cursor == 0

    press(ctl, "p")
    assert ctl.mode.cursor == 2
    press(ctl, "k", "q")
    assert isinstance(ctl.mode, Browse)
    assert ctl.project_filter == "work"

    press(ctl, "p", "g", "k", "k", "enter")
    assert ctl.project_filter == ""
    assert ids(ctl) == ["a", "b", "c"]


def test_create_input_with_tab_completion(make_task, now: datetime) -> None:
    tasks = [
        make_task("a", projects=["work"]),
        make_task("b", projects=["home", "homework"]),
    ]
    ctl = SessionController(tasks, clock=lambda: now)

    press(ctl, "c")
    assert isinstance(ctl.mode, CreateInput)

    press(ctl, "enter")
    assert isinstance(ctl.mode, CreateInput)
    assert not ctl.done

    type_text(ctl, "Buy +wo")
    press(ctl, "tab")
    assert ctl.mode.buffer.text == "Buy +work"

    type_text(ctl, " +ho")
    press(ctl, "tab")
    assert ctl.mode.buffer.text == "Buy +work +ho"

    # completion only at the end of the buffer
    press(ctl, "left", "backspace", "backspace", "tab")
    assert ctl.mode.buffer.text == "Buy +work o"
    press(ctl, "ctrl+e", "ctrl+b", "ctrl+d", "ctrl+a", "ctrl+f", "ctrl+k")
    assert ctl.mode.buffer.text == "B"

    press(ctl, "esc")
    assert isinstance(ctl.mode, Browse)

    press(ctl, "c")
    type_text(ctl, "Call mom +home")
    press(ctl, "enter")
    assert ctl.done
    result = ctl.result()
    assert result.intent is SessionIntent.CREATE
    assert result.new_task_title == "Call mom +home"
    assert not result.modified


def test_edit_reload_and_quit_intents(three, now: datetime) -> None:
    ctl = SessionController(three, clock=lambda: now)
    press(ctl, "j", "e")
    result = ctl.result()
    assert result.intent is SessionIntent.EDIT
    assert result.edit_task.id == "b"
    assert ctl.handle_key("j") is True

    ctl = SessionController(three, clock=lambda: now)
    press(ctl, "r")
    assert ctl.result().reload

    ctl = SessionController(three, clock=lambda: now)
    press(ctl, "ctrl+c")
    assert ctl.result().intent is SessionIntent.QUIT


def test_focus_id_and_show_all(make_task, now: datetime) -> None:
    old = make_task("old", status=TaskStatus.DONE, completed_at=now - timedelta(days=3))
    tasks = [make_task("a", priority="A"), make_task("b", priority="B"), old]

    ctl = SessionController(tasks, focus_id="b", clock=lambda: now)
    assert ctl.current.id == "b"
    assert ids(ctl) == ["a", "b"]

    press(ctl, "a")
    assert ctl.show_all
    assert ids(ctl) == ["a", "b", "old"]
    assert ctl.current.id == "b"

    press(ctl, "G", "a")
    assert ids(ctl) == ["a", "b"]
    assert ctl.cursor == 1


def test_empty_collection(now: datetime) -> None:
    ctl = SessionController([], clock=lambda: now)
    press(ctl, "space", "d", "D", "e", "j")
    assert isinstance(ctl.mode, Browse)
    assert not ctl.done
    assert render_lines(ctl)[0].text == "No tasks found."


def test_render_lines(ctl: SessionController) -> None:
    press(ctl, "j")
    lines = render_lines(ctl, width=60)

    assert lines[0].text == "Tasks:"
    rows = [ln for ln in lines if ln.text.startswith(("> ", "  "))]
    assert rows[1].selected
    assert rows[1].text.startswith("> TODO    [B] milk +home")
    assert all(len(ln.text) <= 60 for ln in lines)

    press(ctl, "/", "m")
    assert any(ln.text.startswith("Search: m|") for ln in render_lines(ctl))

    press(ctl, "enter", "p")
    texts = [ln.text for ln in render_lines(ctl)]
    assert "[All tasks] (3)" in texts
    assert "+home (1)" in texts
