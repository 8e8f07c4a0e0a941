"""
Configuration Package for Site Monitor

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants and enums used throughout the application
- The site list loader
"""

from config.settings import (
    Settings,
    ServerSettings,
    MonitoringSettings,
    LoggingSettings,
    Environment,
    LogLevel,
    LogFormat,
    get_settings
)

from config.constants import (
    ApiRoutes,
    StatusCodes,
    SchedulerState,
    Defaults,
    LogIcons
)

__all__ = [
    # Settings
    "Settings",
    "ServerSettings",
    "MonitoringSettings",
    "LoggingSettings",
    "Environment",
    "LogLevel",
    "LogFormat",
    "get_settings",

    # Constants
    "ApiRoutes",
    "StatusCodes",
    "SchedulerState",
    "Defaults",
    "LogIcons"
]
