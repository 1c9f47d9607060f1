# src/taskeru/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..tasks.note_editor import edit_task_note
from .ports import NoteEditor, TaskRepo


@dataclass
class AppState:
    settings: Settings
    store: TaskRepo

    # Active "+project" filter for listing and the interactive session.
    project_filter: str = ""
    show_all: bool = False

    note_editor: NoteEditor = edit_task_note
