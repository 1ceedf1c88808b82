"""
Custom exceptions for VXA Ask.

This module defines application-specific exceptions that carry an error code,
an HTTP status and structured details, so the boundary can turn any failure
into a well-formed response.
"""

import logging
from typing import Optional, Dict, Any
from enum import Enum

# Configure logger
logger = logging.getLogger(__name__)

class ErrorCode(Enum):
    """Error codes for categorizing exceptions."""
    # Configuration errors (1000-1999)
    CONFIG_ERROR = 1000
    DISPATCH_TABLE_ERROR = 1001

    # Request validation errors (3000-3999)
    INVALID_QUERY = 3001
    MALFORMED_BODY = 3002

    # Record store errors (4000-4999)
    STORE_ERROR = 4000
    STORE_READ_ERROR = 4001
    STORE_RESPONSE_ERROR = 4002

    # Internal errors (9000-9999)
    UNEXPECTED_ERROR = 9999

class VXAError(Exception):
    """Base exception for all VXA Ask errors."""

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: ErrorCode = ErrorCode.UNEXPECTED_ERROR,
        details: Optional[Dict[str, Any]] = None,
        http_status_code: int = 500,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.http_status_code = http_status_code
        self.original_exception = original_exception

        # Log the error
        self._log_error()

        super().__init__(self.message)

    def _log_error(self) -> None:
        """Log the error with appropriate level and details."""
        log_message = f"{self.error_code.name} ({self.error_code.value}): {self.message}"

        if self.details:
            log_message += f" | Details: {self.details}"

        if self.original_exception:
            log_message += f" | Original exception: {str(self.original_exception)}"

        # Log with appropriate level based on error code
        if self.error_code.value < 2000:  # Configuration errors
            logger.error(log_message)
        elif self.error_code.value < 4000:  # Request validation errors
            logger.warning(log_message)
        elif self.error_code.value < 9000:  # Store errors
            logger.error(log_message)
        else:
            logger.critical(log_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": True,
            "error_code": self.error_code.value,
            "error_type": self.error_code.name,
            "message": self.message,
            "details": self.details
        }

# Configuration Errors
class ConfigurationError(VXAError):
    """Exception raised for configuration-related errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        error_code: ErrorCode = ErrorCode.CONFIG_ERROR,
        details: Optional[Dict[str, Any]] = None,
        http_status_code: int = 500,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            http_status_code=http_status_code,
            original_exception=original_exception
        )

# Request Validation Errors
class InvalidRequestError(VXAError):
    """Exception raised when an ask request is missing or has a bad query."""

    def __init__(
        self,
        message: str = "Query is required",
        error_code: ErrorCode = ErrorCode.INVALID_QUERY,
        details: Optional[Dict[str, Any]] = None,
        http_status_code: int = 400,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            http_status_code=http_status_code,
            original_exception=original_exception
        )

# Record Store Errors
class StoreError(VXAError):
    """Exception raised for record store errors."""

    def __init__(
        self,
        message: str = "Record store error",
        error_code: ErrorCode = ErrorCode.STORE_ERROR,
        details: Optional[Dict[str, Any]] = None,
        http_status_code: int = 503,
        original_exception: Optional[Exception] = None,
        collection: Optional[str] = None
    ):
        details = details or {}
        if collection:
            details["collection"] = collection

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            http_status_code=http_status_code,
            original_exception=original_exception
        )

class StoreReadError(StoreError):
    """Exception raised when a read against a record collection fails."""

    def __init__(
        self,
        message: str = "Failed to read records",
        error_code: ErrorCode = ErrorCode.STORE_READ_ERROR,
        details: Optional[Dict[str, Any]] = None,
        http_status_code: int = 503,
        original_exception: Optional[Exception] = None,
        collection: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            http_status_code=http_status_code,
            original_exception=original_exception,
            collection=collection
        )
