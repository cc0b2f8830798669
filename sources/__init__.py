"""
Source adapters for the clerkship dashboard.

Provides the adapter interface and two implementations:
- InMemoryAdapter: payloads already fetched by the caller
- SnapshotAdapter: exported JSON/YAML files, one per source
"""

from .base import (
    SourceAdapter,
    InMemoryAdapter,
    SOURCE_NAMES,
    SCHEDULE,
    SITES,
    ROSTER,
    GRADES,
    EVALUATIONS,
    SURVEY_LINKS,
)
from .snapshot import SnapshotAdapter

__all__ = [
    'SourceAdapter',
    'InMemoryAdapter',
    'SnapshotAdapter',
    'SOURCE_NAMES',
    'SCHEDULE',
    'SITES',
    'ROSTER',
    'GRADES',
    'EVALUATIONS',
    'SURVEY_LINKS',
]
