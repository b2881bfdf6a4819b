"""Logging configuration for the shortlink service.

Everything logs under the ``shortlink`` logger hierarchy; ``setup_logging``
attaches handlers to that root once per process.
"""

import json
import logging
import sys
from typing import Optional

LOGGER_NAME = "shortlink"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the ``shortlink`` logger and return it.

    Calling this again replaces the previous handlers, so scripts and tests
    can reconfigure freely.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of an additional log file
        json_format: Emit JSON lines instead of plain text
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger inside the ``shortlink`` hierarchy, e.g. ``get_logger("web")``."""
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
