"""
============================================================================
SITE MONITOR - CYCLE SCHEDULER
============================================================================
Drives the prober on a fixed cadence and publishes each completed cycle.

State machine
-------------
    IDLE ──start()──► RUNNING ──stop signal──► STOPPED

RUNNING runs one cycle right away, then one per tick of a repeating
interval (MONITOR_CHECK_INTERVAL, default 60 s). Ticks missed while a
cycle overran are dropped, not queued.

The stop signal is an ``asyncio.Event`` checked at every wait point, so
it preempts the next tick. A cycle already started is allowed to finish
(bounded by the per-request timeout) before the loop exits.
============================================================================
"""

import asyncio
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from config.constants import SchedulerState
from config.settings import MonitoringSettings
from monitoring.models import Site, SiteStatus
from monitoring.prober import Prober
from monitoring.store import SnapshotStore
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Scheduler")


class Scheduler:
    """
    Asyncio scheduler for probing cycles.

    Usage
    -----
        scheduler = Scheduler(sites, prober, store, settings)
        await scheduler.start()
        await scheduler.wait_for_cycle()   # first snapshot is live
        # ... later ...
        await scheduler.stop()
    """

    def __init__(
        self,
        sites: Sequence[Site],
        prober: Prober,
        store: SnapshotStore,
        settings: MonitoringSettings,
        stop_event: Optional[asyncio.Event] = None,
    ):
        self.settings = settings
        self._sites = tuple(sites)
        self._prober = prober
        self._store = store

        self._interval = settings.check_interval
        self._grace_period = settings.stop_grace_period

        # --- lifecycle ---
        self._state = SchedulerState.IDLE
        self._stop_event = stop_event or asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        # --- cycle bookkeeping ---
        self._cycle_done = asyncio.Condition()
        self._cycles_completed = 0
        self._cycle_in_progress = False
        self._last_cycle_duration: Optional[float] = None
        self._last_cycle_started: Optional[datetime] = None
        self._last_cycle_finished: Optional[datetime] = None

        logger.info(
            f"Scheduler created — {len(self._sites)} site(s), "
            f"interval={self._interval:g}s"
        )

    # ------------------------------------------------------------------
    # PROPERTIES
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    @property
    def stop_event(self) -> asyncio.Event:
        """The cancellation signal; setting it stops future cycles."""
        return self._stop_event

    @property
    def cycles_completed(self) -> int:
        return self._cycles_completed

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_in_progress

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Enter RUNNING and launch the background loop."""
        if self._state == SchedulerState.RUNNING:
            logger.warning("Scheduler is already running")
            return
        if self._state == SchedulerState.STOPPED:
            logger.warning("Scheduler has been stopped and cannot be restarted")
            return

        self._state = SchedulerState.RUNNING
        self._task = asyncio.create_task(self._run_loop(), name="site-monitor-scheduler")
        logger.info("✓ Scheduler started")

    async def stop(self) -> None:
        """
        Set the stop signal and wait for the loop to exit.

        An in-flight cycle gets ``stop_grace_period`` seconds to finish;
        only past that is the task cancelled.
        """
        self._stop_event.set()

        if self._task:
            try:
                await asyncio.wait_for(asyncio.shield(self._task), timeout=self._grace_period)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Cycle still running after {self._grace_period:g}s grace period — cancelling"
                )
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            self._task = None

        self._state = SchedulerState.STOPPED
        logger.info("✓ Scheduler stopped")

    async def wait_stopped(self, timeout: Optional[float] = None) -> None:
        """Wait for the background loop to exit on its own."""
        if self._task:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)

    # ------------------------------------------------------------------
    # CYCLES
    # ------------------------------------------------------------------

    async def run_once(self) -> List[SiteStatus]:
        """
        Run one full cycle and publish it.

        Returns the published statuses, index-aligned with the sites.
        """
        self._cycle_in_progress = True
        self._last_cycle_started = TimeHelper.get_utc_now()
        start = time.perf_counter()
        try:
            statuses = await self._prober.run_cycle(self._sites)
            await self._store.publish(statuses)
        finally:
            self._cycle_in_progress = False

        self._last_cycle_duration = time.perf_counter() - start
        self._last_cycle_finished = TimeHelper.get_utc_now()

        async with self._cycle_done:
            self._cycles_completed += 1
            self._cycle_done.notify_all()

        return statuses

    async def wait_for_cycle(self, timeout: Optional[float] = None) -> int:
        """
        Wait until the next cycle completes.

        Returns the number of cycles completed so far.
        """
        target = self._cycles_completed + 1
        async with self._cycle_done:
            await asyncio.wait_for(
                self._cycle_done.wait_for(lambda: self._cycles_completed >= target),
                timeout=timeout,
            )
        return self._cycles_completed

    # ------------------------------------------------------------------
    # MAIN LOOP
    # ------------------------------------------------------------------

    async def _run_loop(self) -> None:
        """Immediate cycle, then one cycle per tick until stopped."""
        logger.info("[Scheduler] Loop started")
        loop = asyncio.get_running_loop()

        try:
            if self._stop_event.is_set():
                return

            await self._run_cycle_logged()
            next_tick = loop.time() + self._interval

            while not self._stop_event.is_set():
                delay = next_tick - loop.time()
                if delay > 0 and await self._wait_for_stop(delay):
                    break
                if self._stop_event.is_set():
                    break

                now = loop.time()
                while next_tick <= now:
                    next_tick += self._interval

                logger.info(
                    f"🔍 New probing cycle at "
                    f"{TimeHelper.format_datetime(TimeHelper.get_utc_now())}"
                )
                await self._run_cycle_logged()
        finally:
            self._state = SchedulerState.STOPPED
            logger.info("[Scheduler] Loop exited")

    async def _wait_for_stop(self, delay: float) -> bool:
        """Sleep up to *delay* seconds; True if the stop signal fired."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def _run_cycle_logged(self) -> None:
        try:
            await self.run_once()
        except Exception as e:
            logger.opt(exception=e).error(f"[Scheduler] Cycle failed: {e}")

    # ------------------------------------------------------------------
    # DIAGNOSTICS
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "interval_seconds": self._interval,
            "cycles_completed": self._cycles_completed,
            "cycle_in_progress": self._cycle_in_progress,
            "last_cycle_duration_ms": (
                int(self._last_cycle_duration * 1000)
                if self._last_cycle_duration is not None else None
            ),
            "last_cycle_started": (
                TimeHelper.to_iso(self._last_cycle_started)
                if self._last_cycle_started else None
            ),
            "last_cycle_finished": (
                TimeHelper.to_iso(self._last_cycle_finished)
                if self._last_cycle_finished else None
            ),
        }
