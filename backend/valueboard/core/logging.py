"""
Logging for Valueboard.

Lines look like:

    2025-10-20 09:15:02 | INFO     | valueboard.migrations.runner:_run:103 | Completed upgrade m_1 (41.7 ms) | migration_id=m_1

Context passed to ``LogContext`` (or as ``extra=`` on a plain call) is
appended as ``key=value`` pairs for the keys in ``CONTEXT_KEYS``.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Record attributes rendered after the message, in this order
CONTEXT_KEYS = ("migration_id", "counter_profile", "collection", "record_id")


class ContextFormatter(logging.Formatter):
    """Formatter that appends the migration/DAO context of a record."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) is not None
        ]
        if not pairs:
            return line

        # Keep tracebacks below the context suffix
        head, sep, tail = line.partition("\n")
        return f"{head} | {' '.join(pairs)}{sep}{tail}"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger("valueboard")

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ContextFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str = "valueboard") -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class LogContext:
    """Logs the start, completion (with elapsed time) and failure of an operation."""

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        self.logger = logger
        self.operation = operation
        self.context = context
        self.started = 0.0

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000

    def __enter__(self) -> "LogContext":
        self.started = time.perf_counter()
        self.logger.info(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> bool:
        if exc_type is not None:
            self.logger.error(
                f"Failed {self.operation} after {self.elapsed_ms:.1f} ms: {exc_val}",
                extra=self.context,
                exc_info=True,
            )
        else:
            self.logger.info(
                f"Completed {self.operation} ({self.elapsed_ms:.1f} ms)", extra=self.context
            )
        return False


# Initialize default logger
logger = setup_logging()
