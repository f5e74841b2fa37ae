# src/daylist/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the user's document, starts the
background save queue, then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.save_queue import DebouncedSaveQueue, SaveQueueBackgroundRunner, start_save_queue_in_background
from ..tasks.task_api import load_snapshot

logger = logging.getLogger(__name__)


def _shutdown(state, runner: SaveQueueBackgroundRunner | None) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if runner is not None:
        try:
            # stop() makes the worker flush pending changes before it returns.
            runner.stop()
            runner.join(timeout=15.0)
        except Exception:
            logger.exception("Failed to stop the save queue.")

    store = getattr(state, "store", None)
    try:
        if store is not None and hasattr(store, "close"):
            store.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, app_name=settings.app_name, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    if not load_snapshot(state):
        print("Could not load your tasks from the store. Working locally; see the log for details.")

    runner: SaveQueueBackgroundRunner | None = None
    if isinstance(state.saver, DebouncedSaveQueue):
        state.saver.on_error = lambda exc: logger.warning("Changes not saved yet: %s", exc)
        runner = start_save_queue_in_background(state.saver)

    try:
        run_console_loop(state)
    finally:
        _shutdown(state, runner)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
