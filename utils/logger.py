"""
============================================================================
SITE MONITOR - LOGGING UTILITY
============================================================================
loguru-based logging: console sink, optional rotating file sink (text or
JSON), a separate errors file, and a specialized logger for probe results.
============================================================================
"""

import sys
from typing import Optional, TYPE_CHECKING

from loguru import logger

from config.constants import LogIcons

if TYPE_CHECKING:
    from config.settings import Settings
    from monitoring.models import SiteStatus


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"

# Records emitted through the bare logger still need extra[name]
logger.configure(extra={"name": "root"})


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(settings: Optional["Settings"] = None) -> None:
    """
    Configure loguru sinks from the logging settings.

    Args:
        settings: Application settings (the cached instance is used if omitted)
    """
    if settings is None:
        from config.settings import get_settings
        settings = get_settings()

    log_settings = settings.logging
    log_level = log_settings.level.value

    # Remove default loguru handler
    logger.remove()

    # Console Handler
    if log_settings.to_console:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=log_level,
            colorize=log_settings.colorize,
            backtrace=True,
            diagnose=settings.debug,
        )

    # File Handler
    if log_settings.to_file:
        log_settings.file_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_settings.file_path,
            format=FILE_FORMAT,
            level=log_level,
            rotation=log_settings.rotation,
            retention=log_settings.retention,
            compression="zip",
            serialize=log_settings.format.value == "json",
            backtrace=True,
            diagnose=settings.debug,
        )

        # Error log file (separate file for errors)
        logger.add(
            log_settings.errors_file_path,
            format=FILE_FORMAT,
            level="ERROR",
            rotation="1 day",
            retention="7 days",
            compression="zip",
            backtrace=True,
            diagnose=settings.debug,
        )

    get_logger("Logging").info(
        f"Logging initialized — level={log_level}, "
        f"console={log_settings.to_console}, file={log_settings.to_file}"
    )


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Component name shown in every line

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


# ============================================================================
# SPECIALIZED LOGGERS
# ============================================================================

class ProbeLogger:
    """
    Specialized logger for probe results.

    One line per completed probe: site name, elapsed ms, status code,
    check time and the error text when there is one.
    """

    def __init__(self):
        self.logger = get_logger("Prober")

    def log_probe(self, status: "SiteStatus") -> None:
        """Log the outcome of one probe."""
        icon = LogIcons.UP if status.is_up else LogIcons.DOWN
        line = (
            f"   {icon} {status.site.name:<20} → {status.response_time_ms:>4}ms "
            f"(code {status.status_code}) [{status.last_checked:%H:%M:%S}]"
        )
        if status.error:
            line += f" {status.error}"

        if status.is_up:
            self.logger.info(line)
        else:
            self.logger.warning(line)
