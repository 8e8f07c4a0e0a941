"""
============================================================================
SITE MONITOR - VALIDATORS UTILITY
============================================================================
Validation of URLs and raw site entries read from the site list file.
============================================================================
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import validators as external_validators

from config.constants import Defaults
from exceptions.validation import (
    DuplicateSiteError,
    InvalidFormatError,
    InvalidURLError,
    MissingFieldError,
)
from monitoring.models import Site
from utils.logger import get_logger


logger = get_logger("Validators")


# ============================================================================
# URL VALIDATORS
# ============================================================================

class URLValidator:
    """
    URL validation for monitored sites.
    """

    @staticmethod
    def invalid_reason(url: str) -> Optional[str]:
        """
        Explain why *url* cannot be probed.

        Args:
            url: URL to validate

        Returns:
            A short reason code, or None when the URL is acceptable
        """
        parsed = urlparse(url)

        if parsed.scheme.lower() not in Defaults.ALLOWED_URL_SCHEMES:
            return "no_scheme"

        if not parsed.hostname:
            return "no_host"

        # simple_host lets single-label hosts such as "localhost" through
        result = external_validators.url(url, simple_host=True)
        if result is not True:
            logger.debug(f"URL rejected by validators: {url} ({result})")
            return "malformed"

        return None

    @staticmethod
    def is_valid_url(url: str) -> bool:
        """
        Check if URL is a valid absolute http(s) URL.

        Args:
            url: URL to validate

        Returns:
            True if valid, False otherwise
        """
        return URLValidator.invalid_reason(url) is None


# ============================================================================
# SITE VALIDATORS
# ============================================================================

class SiteValidator:
    """
    Turns raw JSON entries into Site objects, or raises a
    ValidationException subclass describing the first problem found.
    """

    @staticmethod
    def validate_entry(entry: Any, index: int) -> Site:
        """
        Validate one element of the site list.

        Args:
            entry: Decoded JSON value
            index: Position in the list (reported in errors)

        Returns:
            The Site described by *entry*
        """
        if not isinstance(entry, dict):
            raise InvalidFormatError(
                f"Site entry #{index} must be an object, got {type(entry).__name__}",
                expected_format="object with string id, name and url",
                entry=index,
            )

        values: Dict[str, str] = {}
        for field in Defaults.REQUIRED_SITE_FIELDS:
            value = entry.get(field)
            if value is None:
                raise MissingFieldError(
                    f"Site entry #{index} is missing '{field}'",
                    field=field,
                    entry=index,
                )
            if not isinstance(value, str):
                raise InvalidFormatError(
                    f"Site entry #{index}: '{field}' must be a string",
                    field=field,
                    expected_format="string",
                    entry=index,
                )
            if not value.strip():
                raise MissingFieldError(
                    f"Site entry #{index}: '{field}' is empty",
                    field=field,
                    entry=index,
                )
            values[field] = value.strip()

        reason = URLValidator.invalid_reason(values["url"])
        if reason:
            raise InvalidURLError(
                f"Site '{values['id']}' has an invalid URL: {values['url']}",
                url=values["url"],
                reason=reason,
                entry=index,
            )

        return Site(id=values["id"], name=values["name"], url=values["url"])

    @staticmethod
    def validate_list(data: Any) -> List[Site]:
        """
        Validate the whole decoded site list.

        Args:
            data: Decoded JSON document

        Returns:
            Sites in file order
        """
        if not isinstance(data, list):
            raise InvalidFormatError(
                f"Site list must be a JSON array, got {type(data).__name__}",
                expected_format="array of site objects",
            )

        sites: List[Site] = []
        seen: Dict[str, int] = {}
        for index, entry in enumerate(data):
            site = SiteValidator.validate_entry(entry, index)
            if site.id in seen:
                raise DuplicateSiteError(
                    f"Site id '{site.id}' appears at entries #{seen[site.id]} and #{index}",
                    site_id=site.id,
                    entry=index,
                )
            seen[site.id] = index
            sites.append(site)

        return sites
