"""
Logging setup for the ppgen command line tools.

* Adds a console handler (human-readable) on stderr.
* Optionally adds a daily-rotating file handler when a log directory is given.
* Library modules only create loggers; call this once from the entry point.

Usage
-----
    from ppgen.logging_config import setup_logging
    setup_logging(level="DEBUG", log_dir="logs")
"""
from __future__ import annotations

import logging
import logging.handlers
import pathlib
from datetime import datetime
from typing import Literal, Optional

_LEVEL = {
    "CRITICAL": logging.CRITICAL,
    "ERROR":    logging.ERROR,
    "WARNING":  logging.WARNING,
    "INFO":     logging.INFO,
    "DEBUG":    logging.DEBUG,
}

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

FORMAT = "%(asctime)s - %(levelname)s - %(name)s: - %(message)s"
DATEFMT = "%H:%M:%S"


def setup_logging(
    level: LogLevel = "WARNING",
    log_dir: Optional[pathlib.Path | str] = None,
) -> logging.Logger:
    root = logging.getLogger("ppgen")
    root.setLevel(_LEVEL[level.upper()])

    # Re-running setup replaces the handlers instead of stacking them.
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    # ── console ────────────────────────────────────────────────────────────────
    con = logging.StreamHandler()
    con.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    root.addHandler(con)

    # ── file (rotates at midnight, keeps 7 days) ───────────────────────────────
    if log_dir is not None:
        log_path = pathlib.Path(log_dir).resolve()
        log_path.mkdir(parents=True, exist_ok=True)
        file_h = logging.handlers.TimedRotatingFileHandler(
            filename=log_path / f"ppgen-{datetime.now():%Y-%m-%d}.log",
            when="midnight",
            backupCount=7,
            encoding="utf-8",
        )
        file_h.setFormatter(logging.Formatter(FORMAT, DATEFMT))
        root.addHandler(file_h)

    return root
