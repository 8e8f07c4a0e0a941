"""
Site List Loader for Site Monitor

Reads the JSON file that lists the sites to monitor:

    [
        {"id": "docs", "name": "Documentation", "url": "https://docs.example.com"},
        ...
    ]

The list is loaded once at startup and never changes afterwards.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from exceptions.base import ConfigurationError
from monitoring.models import Site
from utils.logger import get_logger
from utils.validators import SiteValidator


logger = get_logger("SiteLoader")


def load_sites(path: Union[str, Path]) -> List[Site]:
    """
    Load and validate the site list.

    Args:
        path: JSON file to read

    Returns:
        Sites in file order

    Raises:
        ConfigurationError: the file is missing, unreadable or not JSON
        ValidationException: an entry is malformed
    """
    path = Path(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Site list file not found: {path}",
            config_key="MONITOR_SITES_FILE",
            cause=e,
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read site list file {path}: {e}",
            config_key="MONITOR_SITES_FILE",
            cause=e,
        ) from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(
            f"Site list file {path} is not valid UTF-8: {e}",
            config_key="MONITOR_SITES_FILE",
            cause=e,
        ) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Site list file {path} is not valid JSON: {e}",
            config_key="MONITOR_SITES_FILE",
            cause=e,
        ) from e

    sites = SiteValidator.validate_list(data)

    if not sites:
        logger.warning(f"Site list {path} is empty — nothing will be probed")
    else:
        logger.debug(f"Loaded {len(sites)} site(s) from {path}")

    return sites
