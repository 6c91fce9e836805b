"""
Custom exceptions for the marketplace search domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, Supabase, etc.).
"""

from typing import Any, Optional


class SearchServiceException(Exception):
    """Base exception for all search service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(SearchServiceException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class RecordSourceException(SearchServiceException):
    """Raised when a candidate record source cannot be read."""

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"Record source '{source}' unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, details={"source": source, "reason": reason})


class ConfigurationException(SearchServiceException):
    """Raised when required settings are missing."""

    def __init__(self, setting: str, reason: Optional[str] = None):
        message = f"Missing or invalid setting: {setting}"
        if reason:
            message += f" ({reason})"
        super().__init__(message=message, details={"setting": setting, "reason": reason})
