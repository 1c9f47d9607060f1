# src/taskeru/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..interactive.render import task_row
from ..tasks.errors import TaskNotFoundError
from ..tasks.note_editor import EditedNote
from ..tasks.task_models import Task, local_now
from ..tasks.task_title import parse_task
from ..tasks.task_view import filter_by_project, filter_visible, sort_tasks

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class UsageError(ValueError):
    """Bad command-line arguments for a command."""


class CommandRegistry:
    """Subcommand registry used by the CLI entrypoint (add, ls, edit, help)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._aliases: dict[str, list[str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        self._aliases[key] = aliases
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, name: str, args: list[str]) -> str | None:
        """
        Run command `name` with `args`.
        Returns the output text or None if `name` is not a command.
        """
        handler = self._handlers.get(name.lower())
        if not handler:
            return None
        logger.debug("Running command %s args=%s", name, args)
        return handler(state, args)

    def build_help(self) -> str:
        lines = [
            "taskeru - simple task manager",
            "",
            "Usage:",
            "  taskeru [-t FILE] [-p PROJECT] [-l LOGDIR] [command] [arguments]",
            "",
            "Commands:",
        ]
        for name, help_text in self._help.items():
            names = ", ".join([name, *self._aliases[name]])
            lines.append(f"  {names:<14} {help_text}")
        lines.append("")
        lines.append("Without a command the interactive task list is started.")
        return "\n".join(lines)


registry = CommandRegistry()


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    raw = " ".join(args).strip()
    if not raw:
        raise UsageError("add requires a task title")
    task = parse_task(raw)
    state.store.add_task(task)
    logger.info("Task added id=%s", task.id)
    return f"Task added: {task.summary()}"


def _first_line(text: str) -> str:
    return text.splitlines()[0] if text else ""


def cmd_ls(state: AppState, args: list[str]) -> str:
    now = local_now()
    tasks = filter_by_project(sort_tasks(state.store.load()), state.project_filter)
    visible = filter_visible(tasks, state.show_all, now)
    hidden = len(tasks) - len(visible)

    lines: list[str] = []
    if not visible:
        lines.append("No tasks found.")
    else:
        lines.append("Tasks:")
        lines.append("------")
        for i, task in enumerate(visible, start=1):
            lines.append(f"{i}. {task_row(task, now)}")
            note = _first_line(task.note)
            if note:
                lines.append(f"   └─ {note}")

    if hidden > 0:
        if visible:
            lines.append("")
        lines.append(f"({hidden} old completed tasks hidden)")
    return "\n".join(lines)


def select_task(state: AppState, tasks: list[Task], id_prefix: str | None) -> Task | None:
    """Pick a task by id prefix, or the first visible one in list order."""
    if id_prefix:
        found = [t for t in tasks if t.id.startswith(id_prefix)]
        if not found:
            raise TaskNotFoundError(id_prefix)
        if len(found) > 1:
            raise UsageError(f"id prefix {id_prefix!r} matches {len(found)} tasks")
        return found[0]

    visible = filter_visible(filter_by_project(sort_tasks(tasks), state.project_filter), state.show_all)
    return visible[0] if visible else None


def commit_edit(state: AppState, task: Task, edited: EditedNote) -> Task:
    """Write an editor result back, failing if the task changed meanwhile."""

    def apply(t: Task) -> None:
        t.set_title(edited.title)
        t.set_projects(edited.projects)
        t.set_note(edited.note)

    return state.store.update_with_conflict_check(task.id, task.updated, apply)


def cmd_edit(state: AppState, args: list[str]) -> str:
    tasks = state.store.load()
    task = select_task(state, tasks, args[0] if args else None)
    if task is None:
        return "No tasks to edit."

    edited = state.note_editor(
        task,
        editor=state.settings.editor,
        add_timestamp=state.settings.add_timestamp,
    )
    updated = commit_edit(state, task, edited)
    return f"Task updated: {updated.title}"


registry.register("help", cmd_help, help_text="Show this help message.", aliases=["h"])
registry.register(
    "add", cmd_add, help_text="Add a task (supports +project, due:<date>, scheduled:<date>).", aliases=["a"]
)
registry.register("ls", cmd_ls, help_text="List tasks (-p filters by project).", aliases=["list", "l"])
registry.register("edit", cmd_edit, help_text="Edit a task's title and note: edit [id-prefix].", aliases=["e"])
