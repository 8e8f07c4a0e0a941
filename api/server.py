"""
============================================================================
SITE MONITOR - JSON API SERVER
============================================================================
A small aiohttp server in front of the monitoring engine:

    GET /api/sites    → JSON array of sites
    GET /api/status   → JSON array of statuses, index-aligned with /api/sites
    GET /api/health   → { status, timestamp, uptime } for the process itself

The server only reads from the engine; the status snapshot is read under
the store's read lock so a response never mixes two cycles.
============================================================================
"""

import time
from typing import Any, Dict, Optional

from aiohttp import web

from api.middleware import create_cors_middleware, error_middleware
from config.constants import ApiRoutes, Defaults
from config.settings import ServerSettings
from exceptions.base import InitializationError
from monitoring.engine import SiteMonitor
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("ApiServer")


class ApiServer:
    """
    aiohttp application plus its runner.

    Attributes
    ----------
    _app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    _start_time : float          — monotonic seconds at construction
    """

    def __init__(self, engine: SiteMonitor, settings: ServerSettings):
        self.engine = engine
        self.settings = settings
        self._start_time = time.monotonic()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._app = self.create_app()

    @property
    def app(self) -> web.Application:
        return self._app

    def create_app(self) -> web.Application:
        """Build the aiohttp application with its middleware and routes."""
        app = web.Application(
            middlewares=[create_cors_middleware(self.settings), error_middleware]
        )
        app.router.add_get(ApiRoutes.SITES.value, self._handle_sites)
        app.router.add_get(ApiRoutes.STATUS.value, self._handle_status)
        app.router.add_get(ApiRoutes.HEALTH.value, self._handle_health)
        return app

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Bind and start serving."""
        if self.settings.port is None:
            raise InitializationError(
                "PORT environment variable is not set",
                component="ApiServer",
            )

        self._runner = web.AppRunner(
            self._app,
            keepalive_timeout=self.settings.keepalive_timeout,
            shutdown_timeout=self.settings.shutdown_timeout,
        )
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.settings.host, self.settings.port)
        await self._site.start()
        logger.info(f"🚀 Site Monitor API listening on {self.settings.host}:{self.settings.port}")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ ApiServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_sites(self, request: web.Request) -> web.Response:
        """GET /api/sites — the static site list."""
        return web.json_response([site.to_dict() for site in self.engine.sites])

    async def _handle_status(self, request: web.Request) -> web.Response:
        """GET /api/status — the latest complete snapshot."""
        snapshot = await self.engine.snapshot()
        return web.json_response([status.to_dict() for status in snapshot])

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /api/health — liveness of this process, not of the sites."""
        return web.json_response(self.health())

    def health(self) -> Dict[str, Any]:
        uptime_seconds = time.monotonic() - self._start_time
        return {
            "status": Defaults.HEALTH_STATUS,
            "timestamp": TimeHelper.to_iso(TimeHelper.get_utc_now()),
            "uptime": TimeHelper.seconds_to_human_readable(int(uptime_seconds)),
        }
