"""File logging for the triage engine, API and CLI.

Everything logs through one ``mindbot`` logger:
    from mindbot.log import logger

What ends up in ~/.mindbot/mindbot.log (rotating, 5 MB max, 3 backups):
crisis keyword hits (WARNING, keyword only, never the message), skipped
history entries, remote backend failures and the local fallback, rejected
config overrides, and the per-message classification at DEBUG. Message
text is not written to the log. Nothing goes to the console, so the
``mindbot chat`` prompt stays clean.
"""

from __future__ import annotations

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

_logger_lock = threading.Lock()


def _get_log_dir() -> Path:
    """Return ~/.mindbot/, creating it if needed."""
    log_dir = Path.home() / ".mindbot"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _setup_logger() -> logging.Logger:
    """Configure and return the mindbot logger."""
    log = logging.getLogger("mindbot")

    with _logger_lock:
        if log.handlers:
            return log

        log.setLevel(logging.DEBUG)
        log.propagate = False

        try:
            log_path = _get_log_dir() / "mindbot.log"
            handler = RotatingFileHandler(
                str(log_path),
                maxBytes=5 * 1024 * 1024,  # 5 MB
                backupCount=3,
                encoding="utf-8",
            )
            handler.setLevel(logging.DEBUG)
            fmt = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s.%(funcName)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            handler.setFormatter(fmt)
            log.addHandler(handler)
        except OSError:
            # Read-only home (containers, CI): keep logging calls harmless
            log.addHandler(logging.NullHandler())
            try:
                sys.stderr.write("mindbot: WARNING: could not create log file, logging disabled\n")
            except OSError:
                pass

    return log


logger = _setup_logger()
