"""Structured logging configuration for microlending.

Engine modules attach the loan, installment or collector a record refers
to with ``extra=log_context(...)``. Both formatters render that context:
the standard one as trailing ``key=value`` pairs, the JSON one as
top-level fields.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: IO[str] | None = None,
) -> None:
    """Configure logging for microlending.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names
        fall back to INFO.
    format_type : str
        Format type: "standard" or "json".
    stream : IO[str] | None
        Output stream (default: stdout).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = ContextFormatter(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("microlending").setLevel(log_level)

    # Reduce noise from external libraries
    logging.getLogger("confluent_kafka").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)


def log_context(**fields: Any) -> dict[str, dict[str, Any]]:
    """Build the ``extra`` argument carrying entity context for a record.

    Fields that are None are dropped.

    Examples
    --------
    >>> logger.debug("Applied payment", extra=log_context(loan_id="loan-1"))
    """
    return {"extra": {key: value for key, value in fields.items() if value is not None}}


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "extra", None) or {}


class ContextFormatter(logging.Formatter):
    """Plain-text formatter that appends the record's entity context."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = _context(record)
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} | {pairs}"


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_context(record))

        # Decimal amounts are written as strings
        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)
