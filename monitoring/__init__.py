"""
============================================================================
SITE MONITOR - MONITORING PACKAGE
============================================================================
The monitoring engine:
    • Site / SiteStatus  — immutable value objects
    • Prober             — one concurrent probing cycle over all sites
    • SnapshotStore      — the published snapshot behind a reader/writer lock
    • Scheduler          — immediate cycle, then one per interval tick
    • SiteMonitor        — owns all of the above; handed to the API layer

File layout
-----------
monitoring/
├── __init__.py          ← this file
├── models.py            ← Site, SiteStatus
├── prober.py            ← Prober
├── store.py             ← ReadWriteLock, SnapshotStore
├── scheduler.py         ← Scheduler
└── engine.py            ← SiteMonitor
============================================================================
"""

from monitoring.models import Site, SiteStatus, placeholder_snapshot
from monitoring.prober import Prober
from monitoring.store import ReadWriteLock, SnapshotStore
from monitoring.scheduler import Scheduler
from monitoring.engine import SiteMonitor

__all__ = [
    # Models
    "Site",
    "SiteStatus",
    "placeholder_snapshot",

    # Engine parts
    "Prober",
    "ReadWriteLock",
    "SnapshotStore",
    "Scheduler",
    "SiteMonitor",
]
