"""
Centralized logging configuration for VXA Ask.

This module provides a standardized logging setup for the application,
logging to the console and optionally to a rotating file, and including
correlation IDs so every line written while answering one question can be
traced back to it.
"""

import sys
import logging
import logging.handlers
import time
import uuid
from contextvars import ContextVar
from typing import Optional, Union

from .config import get_settings

# Constants
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | [%(correlation_id)s] | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

class CorrelationIDFilter(logging.Filter):
    """Filter that adds correlation ID to log records."""

    def filter(self, record):
        """Add correlation_id to the record."""
        if not hasattr(record, 'correlation_id'):
            record.correlation_id = _correlation_id.get() or 'no_correlation_id'
        return True

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get the current correlation ID."""
        return _correlation_id.get()

    @classmethod
    def set_correlation_id(cls, correlation_id: Optional[str] = None) -> str:
        """Set the correlation ID for the current context."""
        value = correlation_id or str(uuid.uuid4())
        _correlation_id.set(value)
        return value

    @classmethod
    def reset_correlation_id(cls) -> None:
        """Reset the correlation ID."""
        _correlation_id.set("")

def get_log_level() -> int:
    """Get the log level from configuration."""
    log_level_name = get_settings().application.log_level.value
    return getattr(logging, log_level_name)

def configure_logging(level: Optional[Union[int, str]] = None,
                      correlation_id: Optional[str] = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Override the log level from settings if provided
        correlation_id: Set a correlation ID for this logging session
    """
    if correlation_id:
        CorrelationIDFilter.set_correlation_id(correlation_id)

    # Determine log level
    if level is None:
        level = get_log_level()
    elif isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)
    correlation_filter = CorrelationIDFilter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    console_handler.addFilter(correlation_filter)
    root_logger.addHandler(console_handler)

    # File handler - daily rotating, only when a log directory is configured
    log_dir = get_settings().application.log_dir
    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"vxa_ask_{time.strftime('%Y%m%d')}.log"
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_file, when='midnight', backupCount=14
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        file_handler.addFilter(correlation_filter)
        root_logger.addHandler(file_handler)

    if level <= logging.INFO:
        # Decrease verbosity of some noisy libraries
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.info(
        f"Logging configured with level={logging.getLevelName(level)}, "
        f"correlation_id={CorrelationIDFilter.get_correlation_id()}"
    )

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    This is the preferred way to get a logger in the application.
    """
    return logging.getLogger(name)
