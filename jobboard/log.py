"""Logging setup for the job board: console plus a daily log file."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
# requests/urllib3 log every connection at DEBUG
_QUIET = ("urllib3", "charset_normalizer")
_configured = False


def _log_dir() -> Path:
    override = os.environ.get("JOBBOARD_LOG_DIR", "").strip()
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "logs"


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def set_level(level: int | str) -> None:
    """Change the console level after start-up (the CLI's --verbose)."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(min(level, root.level))
    for handler in root.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    return handler


def _configure() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)

    # pytest and embedding apps install their own handlers
    if root.handlers:
        return

    root.addHandler(_handler(logging.StreamHandler(sys.stdout), level))

    if os.environ.get("JOBBOARD_LOG_FILE", "true").lower() in ("0", "false", "no"):
        return
    try:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / f"jobboard_{datetime.now().strftime('%Y-%m-%d')}.log"
        root.addHandler(_handler(logging.FileHandler(path, encoding="utf-8"), logging.DEBUG))
    except OSError:
        # Read-only checkout: console logging only.
        pass
