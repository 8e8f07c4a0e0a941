"""
============================================================================
SITE MONITOR - PROBER (CYCLE ENGINE)
============================================================================
Runs one probing cycle: a single timed GET per site, all sites at once,
and hands back the results index-aligned with the input.

Architecture
------------
Prober
├── run_cycle()      ← fans out one probe per site via asyncio.gather,
│                      each probe writes only its own slot of a
│                      pre-sized result list
└── probe()          ← one GET via httpx, timed and classified

Classification
--------------
• no HTTP response (connect error, timeout, protocol error, bad URL)
    → is_up=False, status_code=0, error=<description>
• HTTP response with any status
    → is_up = 200 <= status < 400, error=""

A failed site is a normal result. Nothing raised by a probe escapes
run_cycle().
============================================================================
"""

import asyncio
import time
from typing import List, Optional, Sequence

import httpx

from config.constants import Defaults, StatusCodes
from config.settings import MonitoringSettings
from monitoring.models import Site, SiteStatus
from utils.helpers import TimeHelper
from utils.logger import ProbeLogger, get_logger


logger = get_logger("Prober")


class Prober:
    """
    Concurrent HTTP prober.

    One ``httpx.AsyncClient`` is opened per cycle and shared by every
    probe of that cycle. It has no connection limit: N sites means N
    requests in flight.

    Parameters
    ----------
    settings : MonitoringSettings
        Timeout, redirect, TLS and User-Agent configuration.
    transport : httpx.AsyncBaseTransport | None
        Replaces the network transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: MonitoringSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._timeout = settings.request_timeout
        self._transport = transport
        self._probe_logger = ProbeLogger()

    @property
    def timeout(self) -> float:
        return self._timeout

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=self.settings.follow_redirects,
            max_redirects=self.settings.max_redirects,
            verify=self.settings.verify_ssl,
            limits=httpx.Limits(
                max_connections=None,
                max_keepalive_connections=None,
            ),
            headers={"User-Agent": self.settings.user_agent},
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    # CYCLE
    # ------------------------------------------------------------------

    async def run_cycle(self, sites: Sequence[Site]) -> List[SiteStatus]:
        """
        Probe every site once, concurrently, and wait for all of them.

        Returns
        -------
        list[SiteStatus]
            ``result[i]`` is the status of ``sites[i]``.
        """
        if not sites:
            return []

        results: List[Optional[SiteStatus]] = [None] * len(sites)
        cycle_start = time.perf_counter()

        async with self._build_client() as client:

            async def probe_into(index: int, site: Site) -> None:
                results[index] = await self.probe(site, client)

            outcomes = await asyncio.gather(
                *(probe_into(i, site) for i, site in enumerate(sites)),
                return_exceptions=True,
            )

        # probe() records failures as data; anything here is a bug
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, Exception):
                logger.opt(exception=outcome).error(
                    f"Probe for site '{sites[index].id}' raised unexpectedly"
                )
                status = self._failure(
                    sites[index], 0, f"internal error: {self._describe(outcome)}"
                )
                self._probe_logger.log_probe(status)
                results[index] = status

        final: List[SiteStatus] = [status for status in results if status is not None]
        elapsed_ms = TimeHelper.elapsed_ms(cycle_start, time.perf_counter())
        up = sum(1 for status in final if status.is_up)
        logger.info(f"Cycle complete — {up}/{len(final)} up in {elapsed_ms}ms")

        return final

    # ------------------------------------------------------------------
    # SINGLE PROBE
    # ------------------------------------------------------------------

    async def probe(self, site: Site, client: Optional[httpx.AsyncClient] = None) -> SiteStatus:
        """
        Issue one GET against *site* and classify the outcome.

        The timeout covers the whole exchange, body included.
        """
        if client is None:
            async with self._build_client() as own_client:
                return await self.probe(site, own_client)

        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                client.get(site.url), timeout=self._timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            error = f"request timed out after {self._timeout:g}s"
            if isinstance(e, httpx.TimeoutException):
                error += f" ({type(e).__name__})"
        except httpx.ConnectError as e:
            error = f"connection error: {self._describe(e)}"
        except httpx.TooManyRedirects as e:
            error = f"too many redirects: {self._describe(e)}"
        except httpx.HTTPError as e:
            error = f"{type(e).__name__}: {self._describe(e)}"
        except (httpx.InvalidURL, ValueError) as e:
            error = f"invalid URL: {self._describe(e)}"
        except Exception as e:
            logger.opt(exception=e).error(f"Unexpected error probing {site.url}")
            error = f"unexpected error: {self._describe(e)}"
        else:
            elapsed_ms = TimeHelper.elapsed_ms(start, time.perf_counter())
            status = SiteStatus(
                site=site,
                is_up=StatusCodes.is_up(response.status_code),
                response_time_ms=elapsed_ms,
                status_code=response.status_code,
                last_checked=TimeHelper.get_utc_now(),
            )
            self._probe_logger.log_probe(status)
            return status

        elapsed_ms = TimeHelper.elapsed_ms(start, time.perf_counter())
        status = self._failure(site, elapsed_ms, error)
        self._probe_logger.log_probe(status)
        return status

    @staticmethod
    def _failure(site: Site, elapsed_ms: int, error: str) -> SiteStatus:
        return SiteStatus(
            site=site,
            is_up=False,
            response_time_ms=elapsed_ms,
            status_code=StatusCodes.NO_RESPONSE,
            last_checked=TimeHelper.get_utc_now(),
            error=error[:Defaults.MAX_ERROR_LENGTH],
        )

    @staticmethod
    def _describe(exc: BaseException) -> str:
        """Exception text, falling back to the class name when empty."""
        text = str(exc).strip()
        return text or type(exc).__name__
