"""Validation module for verifying reconciled calendars."""

from careshift.validation.validator import (
    CalendarValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "CalendarValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
