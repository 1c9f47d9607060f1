# src/taskeru/tasks/note_editor.py

"""
Free-form note editing through an external editor.

The task is written to a temporary Markdown file:

    # <title> +project ...

    <note>

and read back after the editor exits. Only the before/after file content
matters here; the editor itself is whatever the settings name.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from datetime import datetime

from .task_models import Task, resolve_now
from .task_title import extract_projects

logger = logging.getLogger(__name__)


class EditorError(RuntimeError):
    """The editor failed or its output could not be read back."""


@dataclass(slots=True, frozen=True)
class EditedNote:
    title: str
    projects: list[str]
    note: str


def compose_note_document(task: Task, *, add_timestamp: bool = False, now: datetime | None = None) -> str:
    heading = " ".join([task.title, *(f"+{p}" for p in task.projects)])
    note = task.note
    if add_timestamp:
        now = resolve_now(now)
        stamp = f"\n\n## {now:%Y-%m-%d}({now:%a}) {now:%H:%M}\n"
        note = note + stamp if note else stamp
    return f"# {heading}\n\n{note}"


def _trim_blank(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def parse_note_document(content: str) -> EditedNote:
    """
    Read back an edited document.

    The first "# " heading is the title line (trailing +projects are split
    off); everything after it is the note. Without a heading the first
    non-blank line becomes the title.
    """
    title = ""
    projects: list[str] = []
    body: list[str] = []
    found_title = False

    for line in content.splitlines():
        if not found_title and line.startswith("# "):
            title, projects = extract_projects(line[2:].strip())
            found_title = True
            continue
        if found_title:
            body.append(line)

    if not found_title:
        body = _trim_blank(content.splitlines())
        if body:
            return EditedNote(title=body[0].strip(), projects=[], note="\n".join(_trim_blank(body[1:])))
        return EditedNote(title="", projects=[], note="")

    return EditedNote(title=title, projects=projects, note="\n".join(_trim_blank(body)))


def edit_task_note(task: Task, *, editor: str, add_timestamp: bool = False) -> EditedNote:
    """
    Run `editor` on a temp copy of the task and return the parsed result.

    Blocks until the editor exits. Raises EditorError on a non-zero exit or
    when the file cannot be read back; the task itself is never touched.
    """
    fd, path = tempfile.mkstemp(prefix="taskeru-", suffix=".md")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(compose_note_document(task, add_timestamp=add_timestamp))

        cmd = [*shlex.split(editor), path]
        logger.debug("Opening editor cmd=%s", cmd)
        try:
            proc = subprocess.run(cmd, check=False)
        except OSError as e:
            raise EditorError(f"failed to start editor {editor!r}: {e}") from e
        if proc.returncode != 0:
            raise EditorError(f"editor {editor!r} exited with status {proc.returncode}")

        try:
            with open(path, encoding="utf-8") as fh:
                edited = fh.read()
        except OSError as e:
            raise EditorError(f"failed to read edited file: {e}") from e
    finally:
        with contextlib.suppress(OSError):
            os.unlink(path)

    result = parse_note_document(edited)
    if not result.title:
        # Keep the old title rather than blanking the task.
        result = EditedNote(title=task.title, projects=result.projects or list(task.projects), note=result.note)
    return result
