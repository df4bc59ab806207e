# src/pocket_tasks/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers that are useful in the file log but drown the REPL prompt:
# - one snapshot line per mutation,
# - SQLite open/write lines,
# - reminder timers (a fired reminder is already printed to the console).
_QUIET_LOGGERS = (
    "pocket_tasks.tasks.task_store.snapshot",
    "pocket_tasks.storage",
    "pocket_tasks.connectors.local_device",
)


def _is_under(name: str, parent: str) -> bool:
    return name == parent or name.startswith(parent + ".")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable: pocket_tasks logs pass, except the
    quiet loggers above below WARNING. Everything else (py.warnings, asyncio,
    sqlite adapters) shows only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if any(_is_under(name, quiet) for quiet in _QUIET_LOGGERS):
            return record.levelno >= logging.WARNING

        if _is_under(name, "pocket_tasks"):
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/pocket_tasks",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route logs to a filtered console handler and a full file log
    (`<log_dir>/pocket_tasks.log`). Returns the log file path.

    Call this once, before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "pocket_tasks.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
    return log_file
