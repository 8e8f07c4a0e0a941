"""
============================================================================
SITE MONITOR - DOMAIN MODELS
============================================================================
Immutable value objects shared by the engine and the API layer.

Site        — one monitored endpoint, loaded once at startup
SiteStatus  — the outcome of one probe against one Site
============================================================================
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Sequence

from config.constants import Defaults, StatusCodes
from utils.helpers import TimeHelper


@dataclass(frozen=True)
class Site:
    """
    A monitored HTTP(S) endpoint.

    Attributes
    ----------
    id : str
        Stable identifier, unique within the site list.
    name : str
        Display name used in logs.
    url : str
        Absolute http(s) URL that gets the GET request.
    """
    id: str
    name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass(frozen=True)
class SiteStatus:
    """
    Result of a single probe. Never mutated; each cycle builds new ones.

    ``error`` is only set for transport-level failures (no HTTP response).
    A response with a status >= 400 is down but carries no error text.
    """
    site: Site
    is_up: bool
    response_time_ms: int
    status_code: int
    last_checked: datetime
    error: str = ""

    @classmethod
    def placeholder(cls, site: Site, checked_at: datetime) -> "SiteStatus":
        """Entry shown for *site* until the first cycle completes."""
        return cls(
            site=site,
            is_up=False,
            response_time_ms=0,
            status_code=StatusCodes.NO_RESPONSE,
            last_checked=checked_at,
            error=Defaults.PLACEHOLDER_ERROR,
        )

    @property
    def is_placeholder(self) -> bool:
        return (
            self.status_code == StatusCodes.NO_RESPONSE
            and self.error == Defaults.PLACEHOLDER_ERROR
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "site": self.site.to_dict(),
            "is_up": self.is_up,
            "response_time_ms": self.response_time_ms,
            "status_code": self.status_code,
            "last_checked": TimeHelper.to_iso(self.last_checked),
        }
        # empty error is left out of the JSON document
        if self.error:
            data["error"] = self.error
        return data


def placeholder_snapshot(sites: Sequence[Site], checked_at: datetime) -> List[SiteStatus]:
    """Build the pre-first-cycle snapshot, index-aligned with *sites*."""
    return [SiteStatus.placeholder(site, checked_at) for site in sites]
