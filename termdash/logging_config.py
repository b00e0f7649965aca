"""
Logging configuration for the `termdash` package.

curses owns the screen while the dashboard runs, so log records are held in
memory and written out once the terminal has been restored.
"""

import logging
import logging.handlers
import sys
from typing import Optional

LOGGER_NAME = "termdash"
BUFFER_CAPACITY = 1000


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[str] = None,
) -> logging.handlers.MemoryHandler:
    """
    Configure the package logger and return its buffering handler.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO).
        log_file: Optional path; records go to stderr when omitted.

    Call `.flush()` on the returned handler after the terminal is restored.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Avoid duplicate output when main() runs more than once in a process.
    if logger.hasHandlers():
        for h in list(logger.handlers):
            h.close()
        logger.handlers.clear()

    if log_file:
        target: logging.Handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    else:
        target = logging.StreamHandler(sys.stderr)
    target.setLevel(level)
    target.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    # flushLevel above CRITICAL: only an explicit flush() (or a full buffer) writes.
    deferred = logging.handlers.MemoryHandler(
        BUFFER_CAPACITY,
        flushLevel=logging.CRITICAL + 1,
        target=target,
    )
    deferred.setLevel(level)
    logger.addHandler(deferred)
    return deferred
