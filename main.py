"""
============================================================================
SITE MONITOR - MAIN APPLICATION
============================================================================
Wires the monitoring engine to the JSON API and owns the process lifecycle.

Startup Order
-------------
1.  Load settings & configure logging
2.  Check that PORT is set
3.  Load the site list (fatal on any error)
4.  Create the SiteMonitor engine (placeholder snapshot is live)
5.  Start the API server
6.  Start the scheduler (first cycle runs right away)

Shutdown Order (reverse)
-------------------------
On SIGINT or SIGTERM:
    stop scheduler (in-flight cycle may finish) → stop API server → exit
============================================================================
"""

import asyncio
import signal
import sys
from typing import List, Optional

from pydantic import ValidationError

from api.server import ApiServer
from config.settings import Settings, get_settings
from config.sites import load_sites
from exceptions.base import ConfigurationError, ShutdownError, SiteMonitorException
from monitoring.engine import SiteMonitor
from monitoring.models import Site
from utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class SiteMonitorApplication:
    """
    Top-level application orchestrator.

    Owns the engine and the API server and is the single place that knows
    the startup / shutdown order.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

        # --- subsystems (populated during startup) ---
        self.sites: List[Site] = []
        self.engine: Optional[SiteMonitor] = None
        self.api_server: Optional[ApiServer] = None

        # --- lifecycle ---
        self._shutdown_event = asyncio.Event()
        self._is_running = False

    # ------------------------------------------------------------------
    # BANNER
    # ------------------------------------------------------------------

    def _print_banner(self) -> None:
        monitoring = self.settings.monitoring
        logger.info("=" * 74)
        logger.info(f"  {self.settings.app_name} v{self.settings.app_version}")
        logger.info(f"  Environment : {self.settings.environment.value}")
        logger.info(f"  Sites file  : {monitoring.sites_file}")
        logger.info(
            f"  Interval    : {monitoring.check_interval:g}s   "
            f"Timeout : {monitoring.request_timeout:g}s"
        )
        logger.info("=" * 74)

    # ==================================================================
    # PHASES
    # ==================================================================

    def _check_config(self) -> bool:
        """PORT has no default; refuse to start without it."""
        if self.settings.server.port is None:
            error = ConfigurationError(
                "PORT environment variable is not set",
                config_key="PORT",
                expected_type=int,
            )
            logger.error(f"  ✗ {error.log_format()}")
            return False
        return True

    def _init_sites(self) -> bool:
        """Load the site list. Any problem here is fatal."""
        logger.info("── Phase 1: Site list ────────────────────────────")
        try:
            self.sites = load_sites(self.settings.monitoring.sites_file)
        except SiteMonitorException as e:
            logger.error(f"  ✗ Cannot load sites: {e.log_format()}")
            return False

        logger.info(f"  ✓ {len(self.sites)} site(s) to monitor")
        return True

    def _init_engine(self) -> None:
        logger.info("── Phase 2: Monitoring engine ────────────────────")
        self.engine = SiteMonitor(self.sites, self.settings.monitoring)
        self.api_server = ApiServer(self.engine, self.settings.server)
        logger.info("  ✓ SiteMonitor and ApiServer created")

    # ==================================================================
    # FULL STARTUP SEQUENCE
    # ==================================================================

    async def startup(self) -> bool:
        """
        Execute the complete startup sequence.
        Returns False (and logs errors) if any critical phase fails.
        """
        self._print_banner()

        if not self._check_config():
            return False

        if not self._init_sites():
            return False

        self._init_engine()

        logger.info("── Starting services ──────────────────────────────")
        try:
            await self.api_server.start()
        except (SiteMonitorException, OSError) as e:
            logger.error(f"  ✗ API server failed to start: {e}")
            return False

        await self.engine.start()

        self._is_running = True
        logger.info("  ✓ ALL SYSTEMS OPERATIONAL")
        return True

    # ==================================================================
    # SHUTDOWN SEQUENCE
    # ==================================================================

    def request_shutdown(self) -> None:
        """Signal-safe: wake up run() so shutdown can proceed."""
        if not self._shutdown_event.is_set():
            logger.info("🔔 Shutdown signal received, stopping…")
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order.
        A failure in one step doesn't prevent the next from running.
        """
        self._is_running = False

        if self.engine:
            try:
                await self.engine.stop()
                logger.info("  ✓ Monitoring stopped")
            except Exception as e:
                error = ShutdownError.from_exception(e, component="SiteMonitor")
                logger.opt(exception=e).error(f"  ✗ {error.log_format()}")

        if self.api_server:
            try:
                await self.api_server.stop()
            except Exception as e:
                error = ShutdownError.from_exception(e, component="ApiServer")
                logger.opt(exception=e).error(f"  ✗ {error.log_format()}")

        logger.info("✅ Server stopped cleanly")

    async def run(self) -> None:
        """Block until a shutdown is requested."""
        await self._shutdown_event.wait()


# ============================================================================
# SIGNAL HANDLER SETUP
# ============================================================================

def _install_signal_handlers(app: SiteMonitorApplication) -> None:
    """Route SIGINT / SIGTERM to a graceful shutdown."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, app.request_shutdown)
        except (NotImplementedError, OSError):
            # Not supported on Windows; KeyboardInterrupt still works
            pass


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

async def main() -> int:
    """Create the app, start it, and run until shutdown. Returns the exit code."""
    try:
        settings = get_settings()
    except ValidationError as e:
        error = ConfigurationError("Invalid configuration", cause=e)
        logger.error(f"{error.log_format()}\n{e}")
        return 1

    setup_logging(settings)

    app = SiteMonitorApplication(settings)
    _install_signal_handlers(app)

    if not await app.startup():
        logger.error("  ✗ Startup failed — exiting")
        await app.shutdown()
        return 1

    try:
        await app.run()
    finally:
        await app.shutdown()

    return 0


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
