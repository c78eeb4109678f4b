"""
Custom Exceptions - Application-specific error classes.

This module defines a hierarchy of exceptions for clean error handling:
- Each exception has a status code and error code
- Used by the API layer for consistent error responses
- No stack traces leaked in production
"""
from typing import Optional


class SimSimiException(Exception):
    """
    Base exception for all SimSimi errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class RateLimitExceeded(SimSimiException):
    """Raised when a client exceeds the rate limit."""
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message="Too many requests. Please slow down!",
            details=f"retry_after={retry_after}"
        )
        self.retry_after = retry_after


class ValidationError(SimSimiException):
    """Raised when a question, answer or search term is rejected."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class StorageFailure(SimSimiException):
    """Raised when the storage backend is unreachable or rejects a write."""
    status_code = 503
    error_code = "storage_failure"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)
