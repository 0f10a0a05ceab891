"""Logging configuration for the server process."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

DEBUG_LOG = "debug.log"
ERROR_LOG = "error.log"


def configure_logging(debug: bool = False, log_dir: str | Path = ".") -> None:
    """Configure the ``crawlbase_mcp`` logger hierarchy.

    Logs go to stderr (stdout carries the stdio transport), errors are
    always appended to error.log, and with debug enabled every record is
    also appended to debug.log.

    Args:
        debug: Enable DEBUG level and the debug.log file
        log_dir: Directory holding the log files
    """
    log_dir = Path(log_dir)
    formatter = logging.Formatter(LOG_FORMAT)

    package_logger = logging.getLogger("crawlbase_mcp")
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)
    package_logger.addHandler(stderr_handler)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        error_handler = logging.FileHandler(log_dir / ERROR_LOG, encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        package_logger.addHandler(error_handler)

        if debug:
            debug_handler = logging.FileHandler(log_dir / DEBUG_LOG, encoding="utf-8")
            debug_handler.setLevel(logging.DEBUG)
            debug_handler.setFormatter(formatter)
            package_logger.addHandler(debug_handler)
    except OSError as e:
        # Fall back to stderr only
        stderr_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
        package_logger.warning(f"Could not open log files in {log_dir}: {e}")
