# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from taskeru.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("TASKERU_FILE", "TASKERU_EDITOR", "EDITOR", "TASKERU_ADD_TIMESTAMP", "TASKERU_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env(dotenv=False)

    assert s.task_file == Path("~/todo.json").expanduser()
    assert s.editor == "vim"
    assert s.add_timestamp is False


def test_env_overrides_and_editor_precedence(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKERU_FILE", str(tmp_path / "t.json"))
    monkeypatch.setenv("EDITOR", "nano")
    monkeypatch.setenv("TASKERU_ADD_TIMESTAMP", "yes")

    s = Settings.from_env(dotenv=False)
    assert s.task_file == tmp_path / "t.json"
    assert s.editor == "nano"
    assert s.add_timestamp is True

    monkeypatch.setenv("TASKERU_EDITOR", "code --wait")
    assert Settings.from_env(dotenv=False).editor == "code --wait"


def test_with_overrides(tmp_path: Path) -> None:
    s = Settings(
        app_name="taskeru",
        log_level="INFO",
        log_dir=tmp_path,
        task_file=tmp_path / "a.json",
        editor="vim",
        add_timestamp=False,
    )
    assert s.with_overrides() is s
    changed = s.with_overrides(task_file=tmp_path / "b.json")
    assert changed.task_file == tmp_path / "b.json"
    assert changed.log_dir == tmp_path
