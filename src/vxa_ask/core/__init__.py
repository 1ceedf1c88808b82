"""
Core configuration, logging and error types for VXA Ask.
"""

from .config import Settings, get_settings
from .exceptions import (
    ErrorCode,
    VXAError,
    ConfigurationError,
    InvalidRequestError,
    StoreError,
    StoreReadError
)
from .logging_config import CorrelationIDFilter, configure_logging, get_logger

__all__ = [
    'Settings',
    'get_settings',
    'ErrorCode',
    'VXAError',
    'ConfigurationError',
    'InvalidRequestError',
    'StoreError',
    'StoreReadError',
    'CorrelationIDFilter',
    'configure_logging',
    'get_logger'
]
