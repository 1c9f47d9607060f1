# src/taskeru/interactive/controller.py

"""
Interactive session controller.

A synchronous state machine over one loaded collection. The terminal driver
feeds it key names ("j", "space", "enter", "ctrl+c", ...) and reads its
state back for rendering. The controller never touches the store or spawns
processes: when the session ends it reports a SessionResult and the caller
performs the persistence and out-of-session work.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from ..tasks.date_parser import DateKind, resolve_date
from ..tasks.task_models import ALL_STATUSES, Task, TaskStatus, local_now
from ..tasks.task_view import (
    all_projects,
    filter_by_project,
    filter_visible,
    first_match,
    match_ids,
    next_match,
    prev_match,
    sort_tasks,
)
from .line_buffer import LineBuffer
from .modes import Browse, CreateInput, DateEdit, DeleteConfirm, Mode, ProjectSelect, Search

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DATE_EDIT_FORMAT = "%Y-%m-%d"


class SessionIntent(StrEnum):
    QUIT = "quit"
    EDIT = "edit"
    CREATE = "create"
    RELOAD = "reload"


@dataclass(slots=True)
class SessionResult:
    tasks: list[Task]
    modified: bool
    intent: SessionIntent
    edit_task: Task | None = None
    deleted_ids: list[str] = field(default_factory=list)
    new_task_title: str = ""

    @property
    def reload(self) -> bool:
        return self.intent is SessionIntent.RELOAD


class SessionController:
    def __init__(
        self,
        tasks: Iterable[Task],
        project_filter: str = "",
        *,
        show_all: bool = False,
        focus_id: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._clock: Clock = clock or local_now
        self._tasks: list[Task] = list(tasks)
        self.project_filter = project_filter
        self.show_all = show_all

        self.visible: list[Task] = []
        self.cursor = 0
        self.mode: Mode = Browse()

        self.query = ""
        self.matches: set[str] = set()

        self.modified = False
        self.deleted_ids: list[str] = []
        self.intent: SessionIntent | None = None
        self._edit_task: Task | None = None
        self._new_task_title = ""

        self._refresh(focus_id)

    # ----- state -----

    @property
    def tasks(self) -> list[Task]:
        """Full unfiltered collection, in sort order."""
        return list(self._tasks)

    @property
    def done(self) -> bool:
        return self.intent is not None

    @property
    def current(self) -> Task | None:
        if 0 <= self.cursor < len(self.visible):
            return self.visible[self.cursor]
        return None

    def now(self) -> datetime:
        return self._clock()

    def project_choices(self) -> list[tuple[str, int]]:
        """("" for all tasks, visible count) followed by each project, alphabetical."""
        now = self.now()
        out = [("", len(filter_visible(self._tasks, self.show_all, now)))]
        for project in sorted(all_projects(self._tasks)):
            out.append((project, len(filter_visible(filter_by_project(self._tasks, project), self.show_all, now))))
        return out

    def result(self) -> SessionResult:
        return SessionResult(
            tasks=self.tasks,
            modified=self.modified,
            intent=self.intent or SessionIntent.QUIT,
            edit_task=self._edit_task,
            deleted_ids=list(self.deleted_ids),
            new_task_title=self._new_task_title,
        )

    # ----- dispatch -----

    def handle_key(self, key: str) -> bool:
        """Process one key. Returns True once the session has ended."""
        if self.done:
            return True

        match self.mode:
            case Browse():
                self._browse_key(key)
            case CreateInput() as mode:
                self._create_key(mode, key)
            case Search() as mode:
                self._search_key(mode, key)
            case DateEdit() as mode:
                self._date_key(mode, key)
            case ProjectSelect() as mode:
                self._project_key(mode, key)
            case DeleteConfirm() as mode:
                self._confirm_key(mode, key)

        return self.done

    def _finish(self, intent: SessionIntent) -> None:
        logger.debug("Session finished intent=%s modified=%s", intent, self.modified)
        self.intent = intent

    # ----- browse -----

    def _browse_key(self, key: str) -> None:
        task = self.current
        match key:
            case "q" | "ctrl+c":
                self._finish(SessionIntent.QUIT)
            case "esc":
                if self.query:
                    self.query = ""
                    self.matches = set()
                else:
                    self._finish(SessionIntent.QUIT)
            case "up" | "k":
                if self.cursor > 0:
                    self.cursor -= 1
            case "down" | "j":
                if self.cursor < len(self.visible) - 1:
                    self.cursor += 1
            case "g":
                self.cursor = 0
            case "G":
                self.cursor = max(len(self.visible) - 1, 0)
            case "space" if task is not None:
                target = TaskStatus.TODO if task.status == TaskStatus.DONE else TaskStatus.DONE
                self._mutate(task, lambda t: t.set_status(target, self.now()))
            case "s" if task is not None:
                nxt = ALL_STATUSES[(ALL_STATUSES.index(task.status) + 1) % len(ALL_STATUSES)]
                self._mutate(task, lambda t: t.set_status(nxt, self.now()))
            case "+" if task is not None:
                self._mutate(task, lambda t: t.increase_priority(self.now()))
            case "-" if task is not None:
                self._mutate(task, lambda t: t.decrease_priority(self.now()))
            case "a":
                self.show_all = not self.show_all
                self._refresh(task.id if task else None)
            case "d" if task is not None:
                self.mode = DeleteConfirm(task_id=task.id)
            case "c":
                self.mode = CreateInput()
            case "/":
                self.query = ""
                self.matches = set()
                self.mode = Search()
            case "n" if self.query:
                self._jump(next_match(self.visible, self.matches, self.cursor))
            case "N" if self.query:
                self._jump(prev_match(self.visible, self.matches, self.cursor))
            case "D" if task is not None:
                self._start_date_edit(task, DateKind.DEADLINE)
            case "S" if task is not None:
                self._start_date_edit(task, DateKind.SCHEDULED)
            case "p":
                self._start_project_select()
            case "r":
                self._finish(SessionIntent.RELOAD)
            case "e" if task is not None:
                self._edit_task = task
                self._finish(SessionIntent.EDIT)

    def _jump(self, index: int | None) -> None:
        if index is not None:
            self.cursor = index

    def _mutate(self, task: Task, change: Callable[[Task], None]) -> None:
        change(task)
        self.modified = True
        self._refresh(task.id)

    def _start_date_edit(self, task: Task, kind: DateKind) -> None:
        current = task.due_date if kind is DateKind.DEADLINE else task.scheduled_date
        seed = current.strftime(DATE_EDIT_FORMAT) if current else ""
        self.mode = DateEdit(kind=kind, task_id=task.id, buffer=LineBuffer.prefilled(seed))

    def _start_project_select(self) -> None:
        projects = sorted(all_projects(self._tasks))
        cursor = 0
        if self.project_filter in projects:
            cursor = projects.index(self.project_filter) + 1
        self.mode = ProjectSelect(projects=projects, cursor=cursor)

    # ----- create -----

    def _create_key(self, mode: CreateInput, key: str) -> None:
        buf = mode.buffer
        match key:
            case "esc":
                self.mode = Browse()
            case "enter":
                title = buf.text.strip()
                if title:
                    self._new_task_title = title
                    self.mode = Browse()
                    self._finish(SessionIntent.CREATE)
            case "tab":
                self._complete_project(buf)
            case "ctrl+d":
                buf.delete()
            case "ctrl+k":
                buf.kill_to_end()
            case _:
                buf.handle_key(key)

    def _complete_project(self, buf: LineBuffer) -> None:
        if not buf.at_end:
            return
        start = buf.text.rfind("+")
        if start < 0:
            return
        partial = buf.text[start + 1 :]
        if not partial or " " in partial:
            return
        candidates = [p for p in all_projects(self._tasks) if p.startswith(partial)]
        if len(candidates) == 1:
            buf.replace(buf.text[: start + 1] + candidates[0])

    # ----- search -----

    def _search_key(self, mode: Search, key: str) -> None:
        buf = mode.buffer
        match key:
            case "enter" | "esc":
                # Leave typing; the query stays active for n/N.
                self.mode = Browse()
                if key == "enter":
                    self._jump(first_match(self.visible, self.matches))
            case _:
                was_empty = not self.query
                if buf.handle_key(key):
                    self.query = buf.text
                    self.matches = match_ids(self.visible, self.query)
                    if was_empty and self.query:
                        self._jump(first_match(self.visible, self.matches))

    # ----- date edit -----

    def _date_key(self, mode: DateEdit, key: str) -> None:
        match key:
            case "esc":
                self.mode = Browse()
            case "enter":
                self.mode = Browse()
                task = self._find(mode.task_id)
                if task is None:
                    return
                now = self.now()
                text = mode.buffer.text.strip()
                value = resolve_date(text, mode.kind, now) if text else None
                if mode.kind is DateKind.DEADLINE:
                    self._mutate(task, lambda t: t.set_due_date(value, now))
                else:
                    self._mutate(task, lambda t: t.set_scheduled_date(value, now))
            case _:
                mode.buffer.handle_key(key)

    # ----- project select -----

    def _project_key(self, mode: ProjectSelect, key: str) -> None:
        match key:
            case "esc" | "q":
                self.mode = Browse()
            case "up" | "k":
                if mode.cursor > 0:
                    mode.cursor -= 1
            case "down" | "j":
                if mode.cursor < len(mode.projects):
                    mode.cursor += 1
            case "enter":
                self.project_filter = mode.projects[mode.cursor - 1] if mode.cursor > 0 else ""
                self.mode = Browse()
                task = self.current
                self._refresh(task.id if task else None)

    # ----- delete confirm -----

    def _confirm_key(self, mode: DeleteConfirm, key: str) -> None:
        match key:
            case "y":
                self.mode = Browse()
                self._delete(mode.task_id)
            case "n" | "esc":
                self.mode = Browse()

    def _delete(self, task_id: str) -> None:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        if len(self._tasks) == before:
            return
        self.deleted_ids.append(task_id)
        self.modified = True
        self._refresh(None)

    # ----- view -----

    def _find(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _refresh(self, follow_id: str | None) -> None:
        """Re-sort and re-filter, then put the cursor back on `follow_id` if it is still visible."""
        self._tasks = sort_tasks(self._tasks)
        self.visible = filter_visible(filter_by_project(self._tasks, self.project_filter), self.show_all, self.now())
        self.matches = match_ids(self.visible, self.query)

        if follow_id is not None:
            for i, task in enumerate(self.visible):
                if task.id == follow_id:
                    self.cursor = i
                    return

        if self.cursor >= len(self.visible):
            self.cursor = len(self.visible) - 1
        if self.cursor < 0:
            self.cursor = 0
