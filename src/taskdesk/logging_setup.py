# src/taskdesk/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskdesk.log"

# Most specific prefix first. Loggers matching none of them reach the console at ERROR+.
_CONSOLE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    # The credential watcher polls in the background; its chatter would interleave with the prompt.
    ("taskdesk.session.storage", logging.WARNING),
    ("taskdesk.", logging.NOTSET),
    ("httpx", logging.ERROR),
    ("httpcore", logging.ERROR),
    ("py.warnings", logging.ERROR),
)


class _ConsoleNoiseFilter(logging.Filter):
    """Console shows taskdesk logs; the credential watcher, httpx and warnings only when serious."""

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, threshold in _CONSOLE_THRESHOLDS:
            if record.name.startswith(prefix):
                return record.levelno >= threshold
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdesk",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """Filtered stderr handler for the REPL plus taskdesk.log under log_dir with everything.

    Returns the log file path so the entry point can mention it.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

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

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
