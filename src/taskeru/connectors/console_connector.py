# src/taskeru/connectors/console_connector.py

"""
Full-screen terminal driver for the interactive session (curses).

Translates curses input into the controller's key names, draws
`render_lines()` output, and returns the controller's SessionResult.
"""

from __future__ import annotations

import curses
import logging

from ..interactive.controller import SessionController, SessionResult
from ..interactive.render import PROJECT_COLORS, Line, Style, Viewport, render_lines
from ..logging_setup import set_console_enabled

logger = logging.getLogger(__name__)

_SPECIAL_KEYS: dict[int, str] = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_ENTER: "enter",
    curses.KEY_HOME: "ctrl+a",
    curses.KEY_END: "ctrl+e",
}

_PROJECT_PAIR_BASE = 16

_CHAR_KEYS: dict[str, str] = {
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\t": "tab",
    "\x7f": "backspace",
    " ": "space",
}


def key_name(ch: int | str) -> str | None:
    """Map a curses `get_wch()` value to a key name, or None to ignore it."""
    if isinstance(ch, int):
        return _SPECIAL_KEYS.get(ch)
    if ch in _CHAR_KEYS:
        return _CHAR_KEYS[ch]
    code = ord(ch)
    if 1 <= code <= 26:
        return f"ctrl+{chr(code + ord('a') - 1)}"
    if ch.isprintable():
        return ch
    return None


class CursesTerminal:
    """Runs one controller session inside `curses.wrapper`."""

    def __init__(self) -> None:
        self._attrs: dict[Style, int] = {}
        self._project_attrs: list[int] = []
        self._view = Viewport(height=0)

    def run(self, controller: SessionController) -> SessionResult:
        set_console_enabled(False)
        try:
            curses.wrapper(self._main, controller)
        finally:
            set_console_enabled(True)
        return controller.result()

    def _init_colors(self) -> None:
        self._attrs = {
            Style.NORMAL: curses.A_NORMAL,
            Style.HEADER: curses.A_BOLD,
            Style.DIM: curses.A_DIM,
            Style.FOOTER: curses.A_BOLD,
            Style.DOING: curses.A_BOLD,
            Style.WAITING: curses.A_NORMAL,
            Style.MATCH: curses.A_STANDOUT,
            Style.OVERDUE: curses.A_BOLD,
        }
        if not curses.has_colors():
            return
        curses.start_color()
        try:
            curses.use_default_colors()
            bg = -1
        except curses.error:
            bg = curses.COLOR_BLACK
        curses.init_pair(1, curses.COLOR_YELLOW, bg)
        curses.init_pair(2, curses.COLOR_BLUE, bg)
        curses.init_pair(3, curses.COLOR_BLACK, curses.COLOR_YELLOW)
        curses.init_pair(4, curses.COLOR_RED, bg)
        self._attrs[Style.DOING] = curses.color_pair(1)
        self._attrs[Style.WAITING] = curses.color_pair(2)
        self._attrs[Style.MATCH] = curses.color_pair(3)
        self._attrs[Style.OVERDUE] = curses.color_pair(4)

        # Project colors need a 256-color terminal and a free pair per color.
        if curses.COLORS < 256 or curses.COLOR_PAIRS <= _PROJECT_PAIR_BASE + len(PROJECT_COLORS):
            return
        for i, color in enumerate(PROJECT_COLORS):
            curses.init_pair(_PROJECT_PAIR_BASE + i, color, bg)
        self._project_attrs = [curses.color_pair(_PROJECT_PAIR_BASE + i) for i in range(len(PROJECT_COLORS))]

    def _draw(self, stdscr, lines: list[Line]) -> None:
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        limit = max(width - 1, 0)
        for y, line in enumerate(lines[: max(height - 1, 0)]):
            attrs = self._attrs.get(line.style, curses.A_NORMAL)
            if line.selected:
                attrs |= curses.A_REVERSE
            try:
                stdscr.addnstr(y, 0, line.text, limit, attrs)
                if self._project_attrs:
                    for accent in line.accents:
                        if accent.start >= limit:
                            continue
                        color = self._project_attrs[accent.color] | (attrs & curses.A_REVERSE)
                        span = line.text[accent.start : accent.end]
                        stdscr.addnstr(y, accent.start, span, limit - accent.start, color)
            except curses.error:
                # Writing into the last cell of the screen raises; the text is already drawn.
                pass
        stdscr.refresh()

    def _main(self, stdscr, controller: SessionController) -> None:
        curses.curs_set(0)
        curses.set_escdelay(25)
        stdscr.keypad(True)
        self._init_colors()

        while not controller.done:
            height, width = stdscr.getmaxyx()
            self._view.height = max(height - 1, 1)
            self._draw(stdscr, render_lines(controller, width, self._view))
            try:
                ch = stdscr.get_wch()
            except KeyboardInterrupt:
                ch = "\x03"
            except curses.error:
                continue
            key = key_name(ch)
            if key is None:
                continue
            controller.handle_key(key)
