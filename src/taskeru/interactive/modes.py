# src/taskeru/interactive/modes.py

"""
Session modes. Exactly one is active; each owns only its own buffers.

Browse is the default; every other mode returns to it when it finishes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.date_parser import DateKind
from .line_buffer import LineBuffer


@dataclass(slots=True)
class Browse:
    pass


@dataclass(slots=True)
class CreateInput:
    buffer: LineBuffer = field(default_factory=LineBuffer)


@dataclass(slots=True)
class Search:
    buffer: LineBuffer = field(default_factory=LineBuffer)


@dataclass(slots=True)
class DateEdit:
    kind: DateKind
    task_id: str
    buffer: LineBuffer = field(default_factory=LineBuffer)


@dataclass(slots=True)
class ProjectSelect:
    # Index 0 is "All tasks"; i > 0 is projects[i - 1].
    projects: list[str]
    cursor: int = 0


@dataclass(slots=True)
class DeleteConfirm:
    task_id: str


Mode = Browse | CreateInput | Search | DateEdit | ProjectSelect | DeleteConfirm
