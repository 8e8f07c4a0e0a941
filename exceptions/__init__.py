"""
Exceptions Package for Site Monitor

Provides a comprehensive exception hierarchy for error handling
throughout the application.
"""

from exceptions.base import (
    SiteMonitorException,
    ConfigurationError,
    InitializationError,
    ShutdownError
)

from exceptions.validation import (
    ValidationException,
    InvalidURLError,
    MissingFieldError,
    InvalidFormatError,
    DuplicateSiteError
)

__all__ = [
    # Base exceptions
    "SiteMonitorException",
    "ConfigurationError",
    "InitializationError",
    "ShutdownError",

    # Validation exceptions
    "ValidationException",
    "InvalidURLError",
    "MissingFieldError",
    "InvalidFormatError",
    "DuplicateSiteError"
]
