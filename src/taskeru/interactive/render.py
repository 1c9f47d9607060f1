# src/taskeru/interactive/render.py

"""Plain-text rendering of a SessionController for terminal drivers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ..tasks.date_parser import DateKind
from ..tasks.task_models import Task, TaskStatus, start_of_day
from ..tasks.task_view import filter_by_project
from .controller import SessionController
from .line_buffer import LineBuffer
from .modes import Browse, CreateInput, DateEdit, DeleteConfirm, ProjectSelect, Search

BROWSE_HELP = (
    "k/j: up/down  g/G: first/last  space: done  s: status  +/-: priority  "
    "D/S: deadline/scheduled  /: search  a: all  c: create  e: edit  d: delete  "
    "p: projects  r: reload  q: quit"
)


class Style(StrEnum):
    NORMAL = "normal"
    HEADER = "header"
    DIM = "dim"
    DOING = "doing"
    WAITING = "waiting"
    MATCH = "match"
    OVERDUE = "overdue"
    FOOTER = "footer"


# xterm-256 foreground colors, readable on light and dark backgrounds.
PROJECT_COLORS: tuple[int, ...] = (
    33, 208, 162, 34, 141, 214, 39, 202, 165, 46,
    135, 220, 45, 196, 171, 118, 99, 215, 51, 205,
    155, 105, 222, 87, 198, 120, 147, 209, 81, 169,
)


def project_color(project: str) -> int:
    """Stable index into PROJECT_COLORS for a project name."""
    return sum(ord(ch) for ch in project) % len(PROJECT_COLORS)


@dataclass(slots=True, frozen=True)
class Accent:
    """Columns `start:end` of a line drawn in project color `color`."""

    start: int
    end: int
    color: int


@dataclass(slots=True, frozen=True)
class Line:
    text: str
    style: Style = Style.NORMAL
    selected: bool = False
    accents: tuple[Accent, ...] = ()


@dataclass(slots=True)
class Viewport:
    """Screen rows available to `render_lines` and the list scroll offset kept between frames."""

    height: int
    scroll: int = 0


_STATUS_STYLE = {
    TaskStatus.DONE: Style.DIM,
    TaskStatus.WONTDO: Style.DIM,
    TaskStatus.DOING: Style.DOING,
    TaskStatus.WAITING: Style.WAITING,
}


def _days_until(moment: datetime, now: datetime) -> int:
    return (start_of_day(moment).date() - start_of_day(now).date()).days


def date_hint(task: Task, now: datetime) -> str:
    """Short "(due ...)"/"(starts ...)"/"(completed ...)" suffix for a row."""
    parts: list[str] = []

    if task.is_future_scheduled(now) and task.scheduled_date is not None:
        days = _days_until(task.scheduled_date, now)
        if days <= 1:
            parts.append("(starts tomorrow)")
        elif days < 7:
            parts.append(f"(starts {task.scheduled_date:%a})")
        else:
            parts.append(f"(starts {task.scheduled_date:%m-%d})")

    if task.is_completed:
        if task.completed_at is not None:
            parts.append(f"(completed {task.completed_at:%Y-%m-%d})")
    elif task.due_date is not None:
        days = _days_until(task.due_date, now)
        if task.due_date < now:
            parts.append(f"(overdue {task.due_date:%m-%d})")
        elif days == 0:
            parts.append("(due today)")
        elif days == 1:
            parts.append("(due tomorrow)")
        elif days < 7:
            parts.append(f"(due {task.due_date:%a})")
        else:
            parts.append(f"(due {task.due_date:%m-%d})")

    return " ".join(parts)


def _project_tag(project: str, start: int) -> tuple[str, Accent]:
    tag = f"+{project}"
    return tag, Accent(start, start + len(tag), project_color(project))


def _task_row_parts(task: Task, now: datetime, offset: int = 0) -> tuple[str, tuple[Accent, ...]]:
    text = f"{task.status:<7} {task.display_priority()} {task.title}"
    accents: list[Accent] = []
    for project in task.projects:
        tag, accent = _project_tag(project, offset + len(text) + 1)
        text += " " + tag
        accents.append(accent)
    hint = date_hint(task, now)
    if hint:
        text += " " + hint
    return text, tuple(accents)


def task_row(task: Task, now: datetime) -> str:
    return _task_row_parts(task, now)[0]


def _row_style(ctl: SessionController, task: Task, now: datetime) -> Style:
    if ctl.query and task.id in ctl.matches:
        return Style.MATCH
    if not task.is_completed and task.due_date is not None and task.due_date < now:
        return Style.OVERDUE
    return _STATUS_STYLE.get(task.status, Style.NORMAL)


def _with_cursor(buf: LineBuffer, mark: str = "|") -> str:
    return buf.text[: buf.cursor] + mark + buf.text[buf.cursor :]


def _header(ctl: SessionController) -> Line:
    if not ctl.project_filter:
        return Line("Tasks:", Style.HEADER)
    shown = len(ctl.visible)
    hidden = len(filter_by_project(ctl.tasks, ctl.project_filter)) - shown
    text = "Tasks for project: "
    tag, accent = _project_tag(ctl.project_filter, len(text))
    text += tag
    if shown or hidden:
        text += f" ({shown} task{'' if shown == 1 else 's'}"
        if hidden:
            text += f", {hidden} hidden"
        text += ")"
    return Line(text, Style.HEADER, accents=(accent,))


def _footer(ctl: SessionController) -> list[Line]:
    match ctl.mode:
        case Search(buffer=buf):
            text = f"Search: {_with_cursor(buf)}"
            if ctl.query:
                text += f" ({len(ctl.matches)} matches)"
            return [Line(text, Style.FOOTER), Line("Enter/Esc: exit input mode", Style.DIM)]
        case DateEdit(kind=kind, buffer=buf):
            label = "deadline" if kind is DateKind.DEADLINE else "scheduled date"
            return [
                Line(f"Set {label}: {_with_cursor(buf)}", Style.FOOTER),
                Line("Enter: apply  Esc: cancel", Style.DIM),
                Line("Formats: next tuesday, in 3 days, today, tomorrow, monday, 2024-12-31, 12-25", Style.DIM),
            ]
        case CreateInput(buffer=buf):
            return [
                Line(f"New task title: {_with_cursor(buf, '_')}", Style.FOOTER),
                Line("Enter: create  Esc: cancel  Tab: complete project  Ctrl+K: kill  Ctrl+D: delete", Style.DIM),
            ]
        case ProjectSelect(projects=projects, cursor=cursor):
            lines = [Line("Select project filter:", Style.FOOTER)]
            for i, (project, count) in enumerate(ctl.project_choices()):
                if project:
                    label, accent = _project_tag(project, 0)
                    accents: tuple[Accent, ...] = (accent,)
                else:
                    label, accents = "[All tasks]", ()
                lines.append(Line(f"{label} ({count})", selected=(i == cursor), accents=accents))
            lines.append(Line("k/j: up/down  Enter: select  Esc/q: cancel", Style.DIM))
            return lines
        case DeleteConfirm():
            return [Line("Delete this task? (y/n)", Style.FOOTER)]
        case Browse():
            text = BROWSE_HELP
            if ctl.query:
                text += f"  n/N: next/prev match  esc: clear search [{ctl.query}]"
            if ctl.show_all:
                text += " [ALL]"
            if ctl.modified:
                text += " *modified*"
            return [Line(text, Style.DIM)]
    return []


def _clip(line: Line, width: int) -> Line:
    accents = tuple(
        Accent(a.start, min(a.end, width), a.color) for a in line.accents if a.start < width
    )
    return Line(line.text[:width], line.style, line.selected, accents)


def scroll_window(cursor: int, total: int, rows: int, scroll: int) -> int:
    """First list index to draw so that `cursor` stays within `rows` rows."""
    if rows <= 0 or total <= rows:
        return 0
    scroll = min(max(scroll, 0), total - rows)
    if cursor < scroll:
        return cursor
    if cursor >= scroll + rows:
        return cursor - rows + 1
    return scroll


def render_lines(
    ctl: SessionController,
    width: int | None = None,
    view: Viewport | None = None,
) -> list[Line]:
    """
    Lines to draw for the current controller state.

    With a `view`, the task list is cut to the rows left over after the
    header and footer, scrolled so the cursor row is shown; `view.scroll`
    is updated in place.
    """
    now = ctl.now()
    lines: list[Line] = []

    if not ctl.tasks and isinstance(ctl.mode, Browse):
        lines.append(Line("No tasks found.", Style.HEADER))
        lines.append(Line("c: create  q: quit", Style.DIM))
    else:
        footer = _footer(ctl)
        rows = list(enumerate(ctl.visible))
        if view is not None:
            # header, blank line above and blank line below the list
            budget = max(view.height - 3 - len(footer), 1)
            view.scroll = scroll_window(ctl.cursor, len(rows), budget, view.scroll)
            rows = rows[view.scroll : view.scroll + budget]

        lines.append(_header(ctl))
        lines.append(Line(""))
        for i, task in rows:
            selected = i == ctl.cursor
            prefix = "> " if selected else "  "
            text, accents = _task_row_parts(task, now, offset=len(prefix))
            lines.append(Line(prefix + text, _row_style(ctl, task, now), selected, accents))
        lines.append(Line(""))
        lines.extend(footer)

    if width is not None and width > 0:
        lines = [_clip(ln, width) for ln in lines]
    return lines
