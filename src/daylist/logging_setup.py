# src/daylist/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers that run off the REPL thread; their INFO lines would interleave with the prompt.
_BACKGROUND_LOGGERS = ("daylist.tasks.save_queue",)

# HTTP client chatter (one line per request) that is never useful at the console.
_HTTP_LOGGERS = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while the REPL waits for input:
    - daylist logs pass, except background components below WARNING
    - captured Python warnings and third-party logs pass only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("daylist."):
            # Save worker: a failed save is a WARNING/ERROR and must still show.
            if name.startswith(_BACKGROUND_LOGGERS):
                return record.levelno >= logging.WARNING
            return True

        # Everything else (py.warnings, httpx, ...): only errors to console.
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/daylist",
    app_name: str = "daylist",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure root logging: a filtered stderr handler for the REPL and a
    `<log_dir>/<app_name>.log` file handler with everything.

    Call once from main(), before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Re-running setup (tests, reloads) must not duplicate output.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)

    # Request lines stay out of the file too; failures surface as StoreUnavailable.
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
