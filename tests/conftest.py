"""Shared fixtures for the Site Monitor test-suite."""

from __future__ import annotations

import asyncio
import socket

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from config.settings import MonitoringSettings
from monitoring.models import Site


@pytest.fixture
def monitoring_settings() -> MonitoringSettings:
    return MonitoringSettings(check_interval=60, request_timeout=2.0)


@pytest.fixture
def sites() -> list:
    return [
        Site(id="a", name="Alpha", url="http://alpha.test/"),
        Site(id="b", name="Beta", url="http://beta.test/"),
        Site(id="c", name="Gamma", url="http://gamma.test/"),
    ]


@pytest.fixture
def unused_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest_asyncio.fixture
async def responder():
    """Local HTTP server answering 200, 404, a redirect and a slow route."""

    async def ok(request: web.Request) -> web.Response:
        return web.Response(text="ok")

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="not here")

    async def moved(request: web.Request) -> web.Response:
        raise web.HTTPFound("/ok")

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(float(request.query.get("delay", "1")))
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/missing", missing)
    app.router.add_get("/moved", moved)
    app.router.add_get("/slow", slow)

    server = TestServer(app, host="127.0.0.1")
    await server.start_server()
    yield server
    await server.close()
