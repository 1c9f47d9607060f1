# src/taskeru/cli/main.py

"""
CLI entrypoint.

Parses flags, initializes logging, builds AppState, then either runs a
single command (add, ls, edit, help) or the interactive session loop.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import UsageError, registry
from ..cli.session import run_interactive
from ..config import Settings, get_settings
from ..core.ports import Terminal
from ..logging_setup import setup_logging
from ..tasks.errors import TaskConflictError, TaskNotFoundError, TaskStoreError
from ..tasks.note_editor import EditorError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskeru", add_help=False)
    parser.add_argument("-t", "--file", dest="task_file", default=None, help="Path to task file")
    parser.add_argument("-p", "--project", dest="project", default="", help="Filter tasks by project")
    parser.add_argument("-l", "--log-dir", dest="log_dir", default=None, help="Directory for the log file")
    parser.add_argument("-h", "--help", dest="show_help", action="store_true")
    parser.add_argument("command", nargs="?", default=None)
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser


def _err(msg: str) -> None:
    print(msg, file=sys.stderr)


def run(
    argv: list[str] | None = None,
    *,
    settings: Settings | None = None,
    terminal: Terminal | None = None,
) -> int:
    """Run the CLI and return the process exit status."""
    opts = build_parser().parse_args(argv)

    settings = (settings or get_settings()).with_overrides(task_file=opts.task_file, log_dir=opts.log_dir)

    level_name = str(settings.log_level).upper()
    file_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, file_level=file_level)

    logger.info("Starting %s (task file %s)", settings.app_name, settings.task_file)

    state = create_initial_state(settings=settings, project_filter=opts.project)

    command = "help" if opts.show_help else opts.command
    try:
        if command is None:
            if terminal is None:
                from ..connectors.console_connector import CursesTerminal

                terminal = CursesTerminal()
            run_interactive(state, terminal)
            return 0

        reply = registry.handle(state, command, opts.args)
        if reply is None:
            _err(f"Unknown command: {command}")
            print(registry.build_help())
            return 1
        print(reply)
        return 0

    except UsageError as e:
        _err(f"Error: {e}")
        return 1
    except TaskConflictError:
        logger.info("Command aborted by conflict")
        _err("Conflict: task was modified by another process, please try again")
        return 1
    except TaskNotFoundError as e:
        _err(f"Task not found: {e.task_id}")
        return 1
    except EditorError as e:
        _err(f"Editor error: {e}")
        return 1
    except (TaskStoreError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        _err(f"Error: {e}")
        return 1


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
