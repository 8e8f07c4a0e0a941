"""
Validation Exception Classes for Site Monitor

Raised by the site list loader. Every error records which entry of the
JSON array was at fault (``details["entry"]``) when there is one.
"""

from __future__ import annotations

from typing import Any, Optional

from exceptions.base import SiteMonitorException


class ValidationException(SiteMonitorException):
    """A site list entry, or the list itself, is malformed."""

    default_error_code = 3000

    # offending values are echoed into logs; keep them short
    max_value_length = 100

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        entry: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        self._add_detail("field", field)
        if value is not None:
            text = str(value)
            if len(text) > self.max_value_length:
                text = text[:self.max_value_length] + "..."
            self.details["value"] = text
        self._add_detail("entry", entry)


class InvalidURLError(ValidationException):
    """
    Site URL is not an absolute http(s) URL.

    ``reason`` is one of ``no_scheme``, ``no_host`` or ``malformed``.
    """

    default_error_code = 3001

    def __init__(
        self,
        message: str = "Invalid URL",
        url: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="url", value=url, **kwargs)
        self._add_detail("reason", reason)


class MissingFieldError(ValidationException):
    """One of id/name/url is absent or blank."""

    default_error_code = 3004

    def __init__(self, message: str = "Required field is missing", field: str = "unknown", **kwargs: Any) -> None:
        super().__init__(message, field=field, **kwargs)


class InvalidFormatError(ValidationException):
    """The document or an entry has the wrong JSON type."""

    default_error_code = 3006

    def __init__(
        self,
        message: str = "Invalid format",
        field: Optional[str] = None,
        expected_format: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field=field, **kwargs)
        self._add_detail("expected_format", expected_format)


class DuplicateSiteError(ValidationException):
    """Two entries share the same site id."""

    default_error_code = 3007

    def __init__(self, message: str = "Duplicate site id", site_id: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, field="id", value=site_id, **kwargs)
