"""
debug_trace.py

Logging setup and lightweight trace helpers.

``configure_logging`` installs a console handler and a rotating file
handler once per process. ``trace`` keeps the category-tagged one-liner
style used around the Qt lifecycle; PAINT traces are dropped unless
TRACE_PAINT is set because the overlay repaints every tick.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union

# Set to True to trace paint events (very verbose)
TRACE_PAINT = False

LOG_FILE_NAME = "dotsight.log"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_trace_log = logging.getLogger("dotsight.trace")
_configured = False
_file_handler: Optional[logging.Handler] = None


def configure_logging(level: Union[int, str] = logging.INFO, log_dir: Optional[Path] = None) -> None:
    """Configure root logging for the application. Safe to call twice."""
    global _configured, _file_handler
    if _configured:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    fmt = logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S")

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            _file_handler = logging.handlers.RotatingFileHandler(
                log_dir / LOG_FILE_NAME, maxBytes=1_000_000, backupCount=2, encoding="utf-8"
            )
            _file_handler.setFormatter(fmt)
            root.addHandler(_file_handler)
        except OSError as e:
            root.warning("File logging disabled, cannot open %s: %s", log_dir, e)

    _configured = True


def trace(msg: str, category: str = "INFO"):
    """Log a category-tagged debug trace line."""
    if category == "PAINT" and not TRACE_PAINT:
        return
    _trace_log.debug("[%s] %s", category, msg)


def trace_exception(msg: str = "Exception"):
    """Log the active exception with its traceback."""
    _trace_log.exception(msg)


def close_log():
    """Flush and detach the file handler."""
    global _file_handler
    if _file_handler is not None:
        logging.getLogger().removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
