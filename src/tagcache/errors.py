"""
tagcache - Core Error Types

Defines the exception hierarchy for the cache runtime.
All exceptions inherit from TagCacheError for consistent error handling.

Propagation policy:
- Backend and serializer faults are never swallowed; they surface as
  BackendExecutionError / SerializationError with the original cause chained.
- Logical no-ops (nothing matched) are reported as False/None, not raised.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for structured error responses.
    """

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"
    EMPTY_INPUT = "EMPTY_INPUT"

    # Configuration errors
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    BACKEND_FAILURE = "BACKEND_FAILURE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TagCacheError(Exception):
    """Base exception for all tagcache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(TagCacheError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class CacheError(TagCacheError):
    """Base exception for cache-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class BackendExecutionError(CacheError):
    """Raised when the storage backend rejects or cannot execute a statement."""

    def __init__(self, operation: str, details: dict[str, Any] | None = None):
        message = f"Storage backend failed during '{operation}'"
        error_details = details or {}
        error_details.setdefault("operation", operation)
        super().__init__(message, error_details)
        self.operation = operation


class SerializationError(CacheError):
    """Raised when a value cannot be encoded or decoded by the selected serializer."""

    def __init__(self, serializer: str, action: str, details: dict[str, Any] | None = None):
        message = f"Serializer '{serializer}' failed to {action} value"
        error_details = details or {}
        error_details.update({"serializer": serializer, "action": action})
        super().__init__(message, error_details)
        self.serializer = serializer
        self.action = action


class ValidationError(TagCacheError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=400)


class EmptyInputError(ValidationError):
    """Raised when an operation requiring non-empty input receives none."""

    def __init__(self, parameter: str, operation: str):
        message = f"'{parameter}' must not be empty for {operation}()"
        super().__init__(message, {"parameter": parameter, "operation": operation})


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, EmptyInputError):
        return ErrorCode.EMPTY_INPUT

    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_INPUT

    if isinstance(error, BackendExecutionError):
        return ErrorCode.BACKEND_FAILURE

    if isinstance(error, SerializationError):
        return ErrorCode.SERIALIZATION_FAILURE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.INVALID_CONFIGURATION

    return ErrorCode.INTERNAL_ERROR
