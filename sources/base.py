"""
Source Adapter Base Classes

Source adapters return the nested record payloads the reconciliation core
consumes: a mapping of record id to arbitrarily nested event and
repeated-instance data. Retrieval from the live source-of-truth system
lives outside this package; adapters here only hand over already-fetched
or exported payloads.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from core.errors import MalformedSourceError, SourceUnavailableError

logger = logging.getLogger(__name__)

# Source names, in the order the pipeline reads them
SCHEDULE = "schedule"
SITES = "sites"
ROSTER = "roster"
GRADES = "grades"
EVALUATIONS = "evaluations"
SURVEY_LINKS = "survey_links"

SOURCE_NAMES = (SCHEDULE, SITES, ROSTER, GRADES, EVALUATIONS, SURVEY_LINKS)


def validate_payload(source: str, payload: Any) -> Dict[str, Any]:
    """Check a payload is a record-id mapping; None means an empty source."""
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise MalformedSourceError(
            f"Source '{source}' must map record ids to records, got {type(payload).__name__}",
            source=source,
        )
    return dict(payload)


class SourceAdapter(ABC):
    """Abstract base class for source adapters."""

    @abstractmethod
    def _load(self, source: str) -> Any:
        """Return the raw payload for a source, raising SourceError on failure."""
        pass

    def fetch(self, source: str) -> Dict[str, Any]:
        """
        Fetch one source payload.

        Raises:
            SourceUnavailableError: unknown source or unreadable data
            MalformedSourceError: payload is not a record-id mapping
        """
        if source not in SOURCE_NAMES:
            raise SourceUnavailableError(f"Unknown source '{source}'", source=source)
        payload = validate_payload(source, self._load(source))
        logger.debug(f"Fetched {len(payload)} records from {source}")
        return payload


class InMemoryAdapter(SourceAdapter):
    """
    Adapter over payloads already fetched by the caller.

    Sources absent from ``payloads`` are treated as unavailable.
    """

    def __init__(self, payloads: Optional[Mapping[str, Any]] = None):
        self.payloads = dict(payloads or {})

    def _load(self, source: str) -> Any:
        if source not in self.payloads:
            raise SourceUnavailableError(f"Source '{source}' was not provided", source=source)
        return self.payloads[source]
