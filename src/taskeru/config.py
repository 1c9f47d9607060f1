# src/taskeru/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing else reads the environment; the store receives its path explicitly.
- Command-line flags override settings via `Settings.with_overrides`.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKERU"

DEFAULT_TASK_FILE = Path("~/todo.json")
DEFAULT_LOG_DIR = Path("~/.local/state/taskeru")
DEFAULT_EDITOR = "vim"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default.expanduser()
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Storage ----
    task_file: Path

    # ---- Note editing ----
    editor: str
    add_timestamp: bool

    @staticmethod
    def from_env(*, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv(override=False)

        return Settings(
            app_name=_env(_k("APP_NAME"), "taskeru") or "taskeru",
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            log_dir=_env_path(_k("LOG_DIR"), DEFAULT_LOG_DIR),
            task_file=_env_path(_k("FILE"), DEFAULT_TASK_FILE),
            editor=_first_env(_k("EDITOR"), "EDITOR", default=DEFAULT_EDITOR) or DEFAULT_EDITOR,
            add_timestamp=_env_bool(_k("ADD_TIMESTAMP"), False),
        )

    def with_overrides(
        self,
        *,
        task_file: str | Path | None = None,
        log_dir: str | Path | None = None,
    ) -> "Settings":
        changes: dict[str, object] = {}
        if task_file:
            changes["task_file"] = Path(task_file).expanduser()
        if log_dir:
            changes["log_dir"] = Path(log_dir).expanduser()
        return dataclasses.replace(self, **changes) if changes else self


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
