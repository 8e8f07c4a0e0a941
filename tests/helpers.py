"""Test helpers shared across modules."""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, Optional, Union

import httpx


Outcome = Union[int, Exception, Callable[[httpx.Request], httpx.Response]]


def make_transport(
    outcomes: Dict[str, Outcome],
    delays: Optional[Dict[str, float]] = None,
    seen: Optional[list] = None,
) -> httpx.MockTransport:
    """
    Mock transport keyed by request host.

    Each host maps to a status code, an exception to raise, or a callable
    returning a response. ``delays`` adds a per-host sleep before answering.
    """
    delays = delays or {}

    async def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if seen is not None:
            seen.append(request)
        delay = delays.get(host, 0.0)
        if delay:
            await asyncio.sleep(delay)
        outcome = outcomes[host]
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(request)
        return httpx.Response(outcome, text=f"status {outcome}")

    return httpx.MockTransport(handler)
