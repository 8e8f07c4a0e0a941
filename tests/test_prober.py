"""Tests for the Prober: classification, timing and index alignment."""

from __future__ import annotations

import time

import httpx
import pytest
from loguru import logger

from config.constants import StatusCodes
from config.settings import MonitoringSettings
from monitoring.models import Site
from monitoring.prober import Prober

from tests.helpers import make_transport


# ════════════════════════════════════════════════════════════════════════
#  Classification
# ════════════════════════════════════════════════════════════════════════


class TestClassification:
    @pytest.mark.asyncio
    async def test_200_is_up_without_error(self, monitoring_settings, sites) -> None:
        prober = Prober(monitoring_settings, transport=make_transport({"alpha.test": 200}))
        status = await prober.probe(sites[0])
        assert status.is_up is True
        assert status.status_code == 200
        assert status.error == ""
        assert status.site == sites[0]

    @pytest.mark.asyncio
    async def test_404_is_down_without_error(self, monitoring_settings, sites) -> None:
        prober = Prober(monitoring_settings, transport=make_transport({"alpha.test": 404}))
        status = await prober.probe(sites[0])
        assert status.is_up is False
        assert status.status_code == 404
        assert status.error == ""

    @pytest.mark.asyncio
    async def test_500_is_down_without_error(self, monitoring_settings, sites) -> None:
        prober = Prober(monitoring_settings, transport=make_transport({"alpha.test": 503}))
        status = await prober.probe(sites[0])
        assert status.is_up is False
        assert status.status_code == 503
        assert status.error == ""

    @pytest.mark.asyncio
    async def test_3xx_without_location_counts_as_up(self, monitoring_settings, sites) -> None:
        prober = Prober(monitoring_settings, transport=make_transport({"alpha.test": 304}))
        status = await prober.probe(sites[0])
        assert status.is_up is True
        assert status.status_code == 304

    @pytest.mark.asyncio
    async def test_connect_error_records_transport_failure(self, monitoring_settings, sites) -> None:
        transport = make_transport({"alpha.test": httpx.ConnectError("Connection refused")})
        prober = Prober(monitoring_settings, transport=transport)
        status = await prober.probe(sites[0])
        assert status.is_up is False
        assert status.status_code == 0
        assert "connection error" in status.error
        assert "Connection refused" in status.error

    @pytest.mark.asyncio
    async def test_protocol_error_is_named(self, monitoring_settings, sites) -> None:
        transport = make_transport({"alpha.test": httpx.RemoteProtocolError("bad header")})
        prober = Prober(monitoring_settings, transport=transport)
        status = await prober.probe(sites[0])
        assert status.status_code == 0
        assert status.error.startswith("RemoteProtocolError")

    @pytest.mark.asyncio
    async def test_exception_without_message_still_has_error_text(self, monitoring_settings, sites) -> None:
        transport = make_transport({"alpha.test": httpx.ReadError("")})
        prober = Prober(monitoring_settings, transport=transport)
        status = await prober.probe(sites[0])
        assert status.error
        assert "ReadError" in status.error

    @pytest.mark.asyncio
    async def test_timeout_bounds_the_whole_exchange(self, sites) -> None:
        settings = MonitoringSettings(request_timeout=0.1)
        transport = make_transport({"alpha.test": 200}, delays={"alpha.test": 2.0})
        prober = Prober(settings, transport=transport)

        start = time.perf_counter()
        status = await prober.probe(sites[0])
        elapsed = time.perf_counter() - start

        assert elapsed < 1.0
        assert status.is_up is False
        assert status.status_code == 0
        assert "timed out" in status.error
        assert status.response_time_ms >= 90

    @pytest.mark.asyncio
    async def test_httpx_timeout_exception(self, monitoring_settings, sites) -> None:
        transport = make_transport({"alpha.test": httpx.ConnectTimeout("too slow")})
        prober = Prober(monitoring_settings, transport=transport)
        status = await prober.probe(sites[0])
        assert "timed out" in status.error
        assert "ConnectTimeout" in status.error

    def test_status_code_boundaries(self) -> None:
        assert not StatusCodes.is_up(199)
        assert StatusCodes.is_up(200)
        assert StatusCodes.is_up(399)
        assert not StatusCodes.is_up(400)
        assert not StatusCodes.is_up(0)


# ════════════════════════════════════════════════════════════════════════
#  Timing & request shape
# ════════════════════════════════════════════════════════════════════════


class TestProbeDetails:
    @pytest.mark.asyncio
    async def test_response_time_is_measured(self, monitoring_settings, sites) -> None:
        transport = make_transport({"alpha.test": 200}, delays={"alpha.test": 0.15})
        prober = Prober(monitoring_settings, transport=transport)
        status = await prober.probe(sites[0])
        assert 140 <= status.response_time_ms < 2000

    @pytest.mark.asyncio
    async def test_last_checked_is_utc_and_fresh(self, monitoring_settings, sites) -> None:
        prober = Prober(monitoring_settings, transport=make_transport({"alpha.test": 200}))
        status = await prober.probe(sites[0])
        assert status.last_checked.tzinfo is not None
        assert status.last_checked.utcoffset().total_seconds() == 0

    @pytest.mark.asyncio
    async def test_sends_get_with_user_agent(self, sites) -> None:
        seen: list = []
        settings = MonitoringSettings(user_agent="probe-test/2.0")
        prober = Prober(settings, transport=make_transport({"alpha.test": 200}, seen=seen))
        await prober.probe(sites[0])
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].headers["user-agent"] == "probe-test/2.0"

    @pytest.mark.asyncio
    async def test_redirect_is_followed(self, monitoring_settings) -> None:
        site = Site(id="r", name="Redirect", url="http://old.test/")

        def redirect(request: httpx.Request) -> httpx.Response:
            return httpx.Response(301, headers={"Location": "http://new.test/"})

        transport = make_transport({"old.test": redirect, "new.test": 404})
        status = await Prober(monitoring_settings, transport=transport).probe(site)
        assert status.status_code == 404
        assert status.error == ""


# ════════════════════════════════════════════════════════════════════════
#  Cycles
# ════════════════════════════════════════════════════════════════════════


class TestRunCycle:
    @pytest.mark.asyncio
    async def test_results_are_index_aligned_under_reverse_completion(
        self, monitoring_settings, sites
    ) -> None:
        # first site answers last, last site answers first
        transport = make_transport(
            {"alpha.test": 200, "beta.test": 404, "gamma.test": 200},
            delays={"alpha.test": 0.2, "beta.test": 0.1, "gamma.test": 0.0},
        )
        results = await Prober(monitoring_settings, transport=transport).run_cycle(sites)

        assert len(results) == len(sites)
        assert [r.site.id for r in results] == [s.id for s in sites]
        assert [r.status_code for r in results] == [200, 404, 200]

    @pytest.mark.asyncio
    async def test_probes_run_concurrently(self, monitoring_settings) -> None:
        many = [Site(id=f"s{i}", name=f"S{i}", url=f"http://s{i}.test/") for i in range(8)]
        transport = make_transport(
            {f"s{i}.test": 200 for i in range(8)},
            delays={f"s{i}.test": 0.2 for i in range(8)},
        )
        start = time.perf_counter()
        results = await Prober(monitoring_settings, transport=transport).run_cycle(many)
        elapsed = time.perf_counter() - start

        assert len(results) == 8
        # bounded by the slowest probe, not the sum (1.6s)
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_one_hanging_site_does_not_poison_others(self, sites) -> None:
        settings = MonitoringSettings(request_timeout=0.2)
        transport = make_transport(
            {"alpha.test": 200, "beta.test": 200, "gamma.test": 200},
            delays={"beta.test": 5.0},
        )
        results = await Prober(settings, transport=transport).run_cycle(sites)

        assert results[0].is_up and results[2].is_up
        assert not results[1].is_up
        assert "timed out" in results[1].error

    @pytest.mark.asyncio
    async def test_mixed_outcomes(self, monitoring_settings, sites) -> None:
        transport = make_transport({
            "alpha.test": 200,
            "beta.test": httpx.ConnectError("refused"),
            "gamma.test": 404,
        })
        results = await Prober(monitoring_settings, transport=transport).run_cycle(sites)

        assert (results[0].is_up, results[0].status_code, results[0].error) == (True, 200, "")
        assert (results[1].is_up, results[1].status_code) == (False, 0)
        assert results[1].error
        assert (results[2].is_up, results[2].status_code, results[2].error) == (False, 404, "")

    @pytest.mark.asyncio
    async def test_empty_site_list(self, monitoring_settings) -> None:
        assert await Prober(monitoring_settings).run_cycle([]) == []

    @pytest.mark.asyncio
    async def test_unexpected_probe_failure_is_still_reported(
        self, monitoring_settings, sites
    ) -> None:
        class BrokenBeta(Prober):
            async def probe(self, site, client=None):
                if site.id == "b":
                    raise RuntimeError("probe bug")
                return await super().probe(site, client)

        transport = make_transport({"alpha.test": 200, "gamma.test": 200})
        lines: list = []
        sink_id = logger.add(lambda message: lines.append(message.record["message"]), level="INFO")
        try:
            results = await BrokenBeta(monitoring_settings, transport=transport).run_cycle(sites)
        finally:
            logger.remove(sink_id)

        assert [r.site.id for r in results] == ["a", "b", "c"]
        assert results[1].status_code == 0
        assert results[1].error == "internal error: probe bug"

        # one result line per site, the broken one included
        result_lines = [line for line in lines if "(code " in line]
        assert len(result_lines) == 3
        assert any("Beta" in line and "internal error: probe bug" in line for line in result_lines)
