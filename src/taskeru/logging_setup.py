# src/taskeru/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_console_handler: logging.Handler | None = None
_console_level = logging.WARNING


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow taskeru logs
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - suppress third-party noise unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("taskeru."):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    console: bool = True,
) -> None:
    """
    Configure logging with:
    - Console handler (stderr): filtered, off while the full-screen session runs
    - File handler: full logs for debugging (skipped when log_dir is None)

    Call this ONCE, very early (before first logger.info).
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    global _console_handler, _console_level
    _console_handler = None
    _console_level = console_level
    if console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(console_level)
        ch.setFormatter(fmt)
        ch.addFilter(_ConsoleNoiseFilter())
        root.addHandler(ch)
        _console_handler = ch

    if log_dir is not None:
        log_dir = Path(log_dir).expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "taskeru.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)


def set_console_enabled(enabled: bool) -> None:
    """Mute/unmute the console handler (the curses session owns the terminal)."""
    if _console_handler is None:
        return
    _console_handler.setLevel(_console_level if enabled else logging.CRITICAL + 1)
