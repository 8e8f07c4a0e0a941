"""
============================================================================
SITE MONITOR - ENGINE
============================================================================
SiteMonitor owns the immutable site list, the snapshot store, the prober
and the scheduler. The API server receives it by reference and only ever
reads from it.
============================================================================
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from config.settings import MonitoringSettings
from monitoring.models import Site, SiteStatus
from monitoring.prober import Prober
from monitoring.scheduler import Scheduler
from monitoring.store import SnapshotStore
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("SiteMonitor")


class SiteMonitor:
    """
    The monitoring engine.

    Parameters
    ----------
    sites : Sequence[Site]
        Loaded once; never modified afterwards.
    settings : MonitoringSettings
    transport : httpx.AsyncBaseTransport | None
        Passed to the prober (tests inject a mock transport).
    stop_event : asyncio.Event | None
        External cancellation handle for the scheduler.
    """

    def __init__(
        self,
        sites: Sequence[Site],
        settings: MonitoringSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        stop_event: Optional[asyncio.Event] = None,
    ):
        self.settings = settings
        self._sites: Tuple[Site, ...] = tuple(sites)
        self._created_at = TimeHelper.get_utc_now()
        self._started_at: Optional[datetime] = None

        self._store = SnapshotStore(self._sites, created_at=self._created_at)
        self._prober = Prober(settings, transport=transport)
        self._scheduler = Scheduler(
            self._sites,
            self._prober,
            self._store,
            settings,
            stop_event=stop_event,
        )

    # ------------------------------------------------------------------
    # READ SIDE (used by the API)
    # ------------------------------------------------------------------

    @property
    def sites(self) -> Tuple[Site, ...]:
        return self._sites

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def started_at(self) -> Optional[datetime]:
        """When the scheduler was started; None before start()."""
        return self._started_at

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    async def snapshot(self) -> Tuple[SiteStatus, ...]:
        """Current snapshot, read under the store's read lock."""
        return await self._store.read()

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self) -> None:
        logger.info(f"✅ {len(self._sites)} site(s) to monitor")
        if self._started_at is None:
            self._started_at = TimeHelper.get_utc_now()
        await self._scheduler.start()

    async def stop(self) -> None:
        await self._scheduler.stop()

    async def run_once(self) -> List[SiteStatus]:
        """Run and publish a single cycle outside the schedule."""
        return await self._scheduler.run_once()

    async def wait_for_cycle(self, timeout: Optional[float] = None) -> int:
        return await self._scheduler.wait_for_cycle(timeout=timeout)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "started_at": TimeHelper.to_iso(self._started_at) if self._started_at else None,
            "store": self._store.get_stats(),
            "scheduler": self._scheduler.get_stats(),
            "request_timeout": self._prober.timeout,
        }
