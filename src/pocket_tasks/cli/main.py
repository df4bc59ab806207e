# src/pocket_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the task snapshot, then runs
the console REPL on an asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import PersistenceError
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> int:
    try:
        tasks = await state.task_store.load()
    except PersistenceError:
        logger.exception("Could not read the task database.")
        return 1

    logger.info("%d task(s) loaded.", len(tasks))
    try:
        await run_console_loop(state)
    finally:
        # Reminder timers die with the loop; nothing else to flush.
        state.notifications.shutdown()
    return 0


def main() -> int:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s... (log file: %s)", settings.app_name, log_file)

    state = create_initial_state(settings=settings)
    try:
        rc = asyncio.run(_run(state))
    except KeyboardInterrupt:
        rc = 0
    logger.info("Bye.")
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
