# src/taskeru/cli/session.py

"""
Interactive session loop.

Each round loads the collection, runs one controller session in the
terminal, then performs what the controller asked for: persist in-session
changes, create a task, open the editor or reload. Creating, editing and
reloading start a new round; quitting ends the loop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.ports import Terminal
from ..core.state import AppState
from ..interactive.controller import Clock, SessionController, SessionIntent, SessionResult
from ..tasks.errors import TaskConflictError, TaskNotFoundError
from ..tasks.note_editor import EditorError
from ..tasks.task_models import Task
from ..tasks.task_title import parse_task
from .commands import commit_edit

logger = logging.getLogger(__name__)

Emitter = Callable[[str], None]


def _persist(state: AppState, result: SessionResult, emit: Emitter) -> None:
    if result.deleted_ids:
        wanted = set(result.deleted_ids)
        deleted = [t for t in state.store.load() if t.id in wanted]
        try:
            state.store.save_deleted_to_trash(deleted)
        except OSError as e:
            # The tasks are still removed from the main file below.
            logger.warning("Failed to save %d task(s) to trash: %s", len(deleted), e)
            emit(f"Warning: failed to save to trash: {e}")

    state.store.save(result.tasks)

    if result.deleted_ids:
        emit(f"{len(result.deleted_ids)} task(s) deleted and moved to trash.")
    else:
        emit("Tasks updated.")


def _edit(state: AppState, task: Task, emit: Emitter) -> None:
    try:
        edited = state.note_editor(
            task,
            editor=state.settings.editor,
            add_timestamp=state.settings.add_timestamp,
        )
        updated = commit_edit(state, task, edited)
    except EditorError as e:
        logger.info("Edit aborted for id=%s: %s", task.id, e)
        emit(f"Editor error: {e}")
        return
    except TaskConflictError:
        emit("Conflict: task was modified by another process, please try again")
        return
    except TaskNotFoundError as e:
        emit(f"Task not found: {e.task_id}")
        return
    emit(f"Task updated: {updated.title}")


def run_interactive(
    state: AppState,
    terminal: Terminal,
    *,
    emit: Emitter = print,
    clock: Clock | None = None,
) -> None:
    focus_id: str | None = None

    while True:
        controller = SessionController(
            state.store.load(),
            state.project_filter,
            show_all=state.show_all,
            focus_id=focus_id,
            clock=clock,
        )
        result = terminal.run(controller)

        # Filter and show-all survive into the next round.
        state.project_filter = controller.project_filter
        state.show_all = controller.show_all
        focus_id = None

        if result.modified:
            _persist(state, result, emit)

        match result.intent:
            case SessionIntent.CREATE:
                task = parse_task(result.new_task_title, clock() if clock else None)
                state.store.add_task(task)
                logger.info("Task created id=%s", task.id)
                emit(f"Task created: {task.summary()}")
                focus_id = task.id
            case SessionIntent.EDIT if result.edit_task is not None:
                focus_id = result.edit_task.id
                _edit(state, result.edit_task, emit)
            case SessionIntent.RELOAD:
                logger.debug("Reloading tasks from %s", state.settings.task_file)
            case _:
                return
