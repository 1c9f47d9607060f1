# src/taskeru/interactive/line_buffer.py

from __future__ import annotations

from dataclasses import dataclass

# Keys that move within or edit a single-line buffer.
_MOVE_LEFT = ("left", "ctrl+b")
_MOVE_RIGHT = ("right", "ctrl+f")
_BACKSPACE = ("backspace", "ctrl+h")


@dataclass(slots=True)
class LineBuffer:
    """Single-line text input with a cursor (index into `text`)."""

    text: str = ""
    cursor: int = 0

    @classmethod
    def prefilled(cls, text: str) -> LineBuffer:
        return cls(text=text, cursor=len(text))

    @property
    def at_end(self) -> bool:
        return self.cursor == len(self.text)

    def insert(self, s: str) -> None:
        self.text = self.text[: self.cursor] + s + self.text[self.cursor :]
        self.cursor += len(s)

    def backspace(self) -> None:
        if self.cursor > 0:
            self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
            self.cursor -= 1

    def delete(self) -> None:
        if self.cursor < len(self.text):
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1 :]

    def kill_to_end(self) -> None:
        self.text = self.text[: self.cursor]

    def replace(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)

    def handle_key(self, key: str) -> bool:
        """
        Apply a common editing key. Returns True when the text changed.

        Cursor motion returns False; unknown keys are ignored.
        """
        if key == "ctrl+a":
            self.cursor = 0
        elif key == "ctrl+e":
            self.cursor = len(self.text)
        elif key in _MOVE_RIGHT:
            self.cursor = min(self.cursor + 1, len(self.text))
        elif key in _MOVE_LEFT:
            self.cursor = max(self.cursor - 1, 0)
        elif key in _BACKSPACE:
            before = self.text
            self.backspace()
            return self.text != before
        elif key == "delete":
            before = self.text
            self.delete()
            return self.text != before
        elif key == "space":
            self.insert(" ")
            return True
        elif len(key) == 1 and key.isprintable():
            self.insert(key)
            return True
        return False
