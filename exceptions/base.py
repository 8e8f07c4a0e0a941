"""
Base Exception Classes for Site Monitor

Startup, configuration and shutdown failures. Probe failures are never
raised; they are recorded on the SiteStatus instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type


class SiteMonitorException(Exception):
    """
    Root of the Site Monitor exception hierarchy.

    Attributes:
        message: Human-readable error message
        error_code: Numeric code, grouped by subsystem (1xxx lifecycle, 3xxx site list)
        details: Structured context (config key, field, entry index, ...)
        cause: The lower-level exception this one wraps, if any
    """

    default_error_code: int = 1000

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause

    def _add_detail(self, key: str, value: Any) -> None:
        if value is not None:
            self.details[key] = value

    def log_format(self) -> str:
        """One-line form used by the startup and shutdown logs."""
        parts = [
            f"{type(self).__name__} [{self.error_code}]",
            self.message,
        ]
        if self.details:
            parts.append(", ".join(f"{k}={v}" for k, v in self.details.items()))
        if self.cause is not None:
            parts.append(f"caused by {type(self.cause).__name__}: {self.cause}")
        return " | ".join(parts)

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        message: Optional[str] = None,
        **kwargs: Any
    ) -> "SiteMonitorException":
        """Wrap *exception*, reusing its text unless *message* is given."""
        return cls(message or str(exception) or type(exception).__name__, cause=exception, **kwargs)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(SiteMonitorException):
    """Missing PORT, invalid settings, or an unreadable site list file."""

    default_error_code = 1100

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[Type] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        self._add_detail("config_key", config_key)
        if expected_type is not None:
            self.details["expected_type"] = expected_type.__name__


class InitializationError(SiteMonitorException):
    """A component (API server, engine) could not start."""

    default_error_code = 1200

    def __init__(self, message: str, component: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self._add_detail("component", component)


class ShutdownError(SiteMonitorException):
    """A component failed while stopping; later shutdown steps still run."""

    default_error_code = 1300

    def __init__(self, message: str, component: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self._add_detail("component", component)
