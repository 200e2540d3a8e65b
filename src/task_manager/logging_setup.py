# src/task_manager/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

APP_LOGGER_PREFIX = "task_manager."

# Loggers that talk per request; WARNING+ only on the console.
QUIET_APP_LOGGERS = ("task_manager.backend.",)

# Third-party loggers capped at WARNING everywhere (httpx logs every request at INFO).
CHATTY_LIBRARIES = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive prompt readable.

    App records pass, except the quiet ones below WARNING. Everything else
    (third-party, py.warnings) only shows from ERROR up. The file handler
    has no filter and still gets all of it.
    """

    def __init__(self, app_prefix: str = APP_LOGGER_PREFIX, quiet: Iterable[str] = QUIET_APP_LOGGERS) -> None:
        super().__init__()
        self._app_prefix = app_prefix
        self._quiet = tuple(quiet)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(self._app_prefix):
            if name.startswith(self._quiet):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/task_manager",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_file_name: str = "task_manager.log",
) -> Path:
    """
    Console handler (filtered) on stderr + file handler with everything.

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
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

    to_file = logging.FileHandler(str(log_file), encoding="utf-8")
    to_file.setLevel(file_level)
    to_file.setFormatter(fmt)
    root.addHandler(to_file)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)

    for lib in CHATTY_LIBRARIES:
        logging.getLogger(lib).setLevel(logging.WARNING)

    return log_file
