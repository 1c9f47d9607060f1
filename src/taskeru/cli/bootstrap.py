# src/taskeru/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once (command-line overrides applied by the caller),
- ensures the task file directory exists,
- wires the file store and note editor into AppState.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.task_file.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings: Settings | None = None, project_filter: str = "") -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    logger.debug("Using task file %s", settings.task_file)

    return AppState(
        settings=settings,
        store=TaskStore(settings.task_file),
        project_filter=project_filter,
    )
