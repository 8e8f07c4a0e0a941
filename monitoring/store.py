"""
============================================================================
SITE MONITOR - SNAPSHOT STORE
============================================================================
Holds the one published snapshot (a tuple of SiteStatus, index-aligned
with the site list) behind a reader/writer lock.

Readers (the API) take the read side; the scheduler takes the write side
only for the swap of the tuple reference, never while probes are running.
============================================================================
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Iterable, Optional, Sequence, Tuple

from monitoring.models import Site, SiteStatus, placeholder_snapshot
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("SnapshotStore")


# ============================================================================
# READER / WRITER LOCK
# ============================================================================

class ReadWriteLock:
    """
    asyncio reader/writer lock.

    Any number of readers may hold the lock together; a writer holds it
    alone. A waiting writer blocks new readers so a steady stream of
    API requests cannot starve the publisher.
    """

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    async def acquire_read(self) -> None:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and self._writers_waiting == 0
            )
            self._readers += 1

    async def release_read(self) -> None:
        async with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    async def acquire_write(self) -> None:
        async with self._cond:
            self._writers_waiting += 1
            acquired = False
            try:
                await self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
                self._writer = True
                acquired = True
            finally:
                self._writers_waiting -= 1
                if not acquired:
                    # readers parked behind this writer must re-check
                    self._cond.notify_all()

    async def release_write(self) -> None:
        async with self._cond:
            self._writer = False
            self._cond.notify_all()

    @asynccontextmanager
    async def read_locked(self) -> AsyncIterator[None]:
        await self.acquire_read()
        try:
            yield
        finally:
            await self.release_read()

    @asynccontextmanager
    async def write_locked(self) -> AsyncIterator[None]:
        await self.acquire_write()
        try:
            yield
        finally:
            await self.release_write()


# ============================================================================
# SNAPSHOT STORE
# ============================================================================

class SnapshotStore:
    """
    The only mutable state shared between the engine and the API.

    Created with placeholder entries so readers never observe an empty
    snapshot; each ``publish`` replaces the whole tuple at once.
    """

    def __init__(self, sites: Sequence[Site], created_at: Optional[datetime] = None):
        self._sites: Tuple[Site, ...] = tuple(sites)
        self._snapshot: Tuple[SiteStatus, ...] = tuple(
            placeholder_snapshot(self._sites, created_at or TimeHelper.get_utc_now())
        )
        self._lock = ReadWriteLock()
        self._cycle_count = 0
        self._published_at: Optional[datetime] = None

    @property
    def sites(self) -> Tuple[Site, ...]:
        return self._sites

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    @property
    def cycle_count(self) -> int:
        """Number of snapshots published since startup."""
        return self._cycle_count

    @property
    def published_at(self) -> Optional[datetime]:
        return self._published_at

    async def read(self) -> Tuple[SiteStatus, ...]:
        """Return the current snapshot under the read lock."""
        async with self._lock.read_locked():
            return self._snapshot

    async def publish(self, statuses: Iterable[SiteStatus]) -> None:
        """
        Install *statuses* as the current snapshot.

        Raises
        ------
        ValueError
            The snapshot is not index-aligned with the site list.
        """
        snapshot = tuple(statuses)
        self._check_alignment(snapshot)

        async with self._lock.write_locked():
            self._snapshot = snapshot
            self._cycle_count += 1
            self._published_at = TimeHelper.get_utc_now()

        logger.debug(f"Snapshot #{self._cycle_count} published ({len(snapshot)} entries)")

    def _check_alignment(self, snapshot: Tuple[SiteStatus, ...]) -> None:
        if len(snapshot) != len(self._sites):
            raise ValueError(
                f"Snapshot has {len(snapshot)} entries, expected {len(self._sites)}"
            )
        for index, (status, site) in enumerate(zip(snapshot, self._sites)):
            if status.site.id != site.id:
                raise ValueError(
                    f"Snapshot entry #{index} is for site '{status.site.id}', "
                    f"expected '{site.id}'"
                )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "sites": len(self._sites),
            "cycle_count": self._cycle_count,
            "published_at": (
                TimeHelper.to_iso(self._published_at) if self._published_at else None
            ),
        }
