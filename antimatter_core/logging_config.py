"""
Structured Logging Configuration Module

Provides JSON-formatted structured logging for simulation events such as
purchases, prestige resets and offline boosts.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "action": getattr(record, 'action', None),
            "resource": getattr(record, 'resource', None),
            "extra": getattr(record, 'extra', None)
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "antimatter",
                  log_format: str = "json", log_file: Optional[str] = None) -> logging.Logger:
    """
    Setup logging for the simulation.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the root logger for the package
        log_format: "json" for structured output, "text" for plain lines
        log_file: Optional file path; stdout when None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if log_file:
        handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler()

    if log_format.lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log a gameplay action with structured data.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        action: Action being performed (e.g. "buy_dimension")
        resource: Resource being acted upon (e.g. "dimension:3")
        extra: Additional structured data
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    record = logger.makeRecord(
        logger.name, levelno,
        __name__, 0, message, (), None
    )

    if action:
        record.action = action
    if resource:
        record.resource = resource
    if extra:
        record.extra = extra

    logger.handle(record)
