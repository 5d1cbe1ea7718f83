"""
Custom exceptions for the Coursebook engine.
"""

from typing import Optional, Any, Dict


class CoursebookException(Exception):
    """Base exception for all Coursebook-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(CoursebookException):
    """Raised when data validation fails."""
    pass


class InvalidCapacityError(ValidationError):
    """Raised when a course is created with a non-positive capacity."""
    pass


class InvalidGradeRangeError(ValidationError):
    """Raised when a grade falls outside the accepted range."""
    pass


class ConfigurationError(CoursebookException):
    """Raised when configuration is invalid."""
    pass
