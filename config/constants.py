"""
Constants Module for Site Monitor

Contains constant values and enumerations used throughout
the application.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Tuple


class ApiRoutes(str, Enum):
    """Paths served by the JSON API."""

    SITES = "/api/sites"
    STATUS = "/api/status"
    HEALTH = "/api/health"


class StatusCodes:
    """
    HTTP status code classification.

    A site answering with a code in [UP_MIN, UP_MAX) is considered up.
    Any other code is recorded as down without an error description.
    """

    UP_MIN: Final[int] = 200
    UP_MAX: Final[int] = 400

    # Recorded when no HTTP response was obtained
    NO_RESPONSE: Final[int] = 0

    @classmethod
    def is_up(cls, status_code: int) -> bool:
        """Return True when *status_code* counts as a live site."""
        return cls.UP_MIN <= status_code < cls.UP_MAX


class SchedulerState(str, Enum):
    """Lifecycle states of the scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Defaults:
    """Default values shared across modules."""

    PLACEHOLDER_ERROR: Final[str] = "awaiting first check"
    HEALTH_STATUS: Final[str] = "ok"
    INTERNAL_ERROR_TEXT: Final[str] = "Internal server error"
    MAX_ERROR_LENGTH: Final[int] = 300
    ALLOWED_URL_SCHEMES: Final[Tuple[str, ...]] = ("http", "https")
    REQUIRED_SITE_FIELDS: Final[Tuple[str, ...]] = ("id", "name", "url")


class LogIcons:
    """Markers used in per-probe log lines."""

    UP: Final[str] = "✅"
    DOWN: Final[str] = "❌"
