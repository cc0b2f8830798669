"""
Cross-Reference Joiner

Attaches site addresses, student-level roster metadata and per-slot survey
links to merged periods. Every missing lookup degrades to a placeholder.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from ..config import DashboardConfig
from ..constants import NO_ADDRESS_FOUND, SLOT_SURVEY_INSTRUMENTS
from ..logging_config import StageLoggerAdapter
from ..models import RotationPeriod, as_form_complete
from .base import first_row, flatten_record

logger = logging.getLogger(__name__)
stage_log = StageLoggerAdapter(logger, {"stage": "cross_reference"})


def build_site_directory(site_payload: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Map site record id -> first non-empty site address among its instances.

    The site record id is the location string used on schedule events.
    """
    sites: Dict[str, str] = {}
    for record_id, record in (site_payload or {}).items():
        for row in flatten_record(str(record_id), record):
            address = str(row.get("site_address") or "").strip()
            if address:
                sites[str(record_id)] = address
                break
    logger.debug(f"Site directory: {len(sites)} addresses")
    return sites


def build_roster(roster_payload: Optional[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Map student key -> first roster row."""
    return {
        str(key): first_row(str(key), record)
        for key, record in (roster_payload or {}).items()
    }


def onboarding_links(roster_row: Mapping[str, Any]) -> Tuple[str, ...]:
    """Non-empty onboarding_*url fields in roster field order."""
    return tuple(
        str(value)
        for name, value in roster_row.items()
        if name.startswith("onboarding") and name.endswith("url") and value
    )


def public_schedule_link(base_url: str, student_key: str) -> str:
    """Deep link to one student's public schedule page."""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}student_id={quote(student_key)}"


class CrossReferenceJoiner:
    """
    Joins roster, site directory and survey links onto periods.

    Args:
        config: Request configuration (single-student view, base URL)
        sites: Location -> site address
        roster: Student key -> roster row
        survey_links: Record id -> instrument -> URL
    """

    def __init__(
        self,
        config: DashboardConfig,
        sites: Optional[Mapping[str, str]] = None,
        roster: Optional[Mapping[str, Mapping[str, Any]]] = None,
        survey_links: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        self.config = config
        self.sites = sites or {}
        self.roster = roster or {}
        self.survey_links = survey_links or {}

    def site_address(self, location: str) -> str:
        return self.sites.get(location, NO_ADDRESS_FOUND)

    def slot_survey_links(self, record_id: str) -> Dict[str, Optional[str]]:
        links = self.survey_links.get(record_id) or {}
        return {instrument: links.get(instrument) for instrument in SLOT_SURVEY_INSTRUMENTS}

    def join_period(self, period: RotationPeriod, roster_row: Mapping[str, Any]) -> RotationPeriod:
        """Return an enriched copy of one period."""
        changes: Dict[str, Any] = {
            "site_address": self.site_address(period.site_location),
            "email": roster_row.get("email") or None,
            "schedule_url": roster_row.get("schedule_url") or None,
            "lecture_evaluation_url": roster_row.get("lecture_evaluation_url") or None,
            "onboarding_urls": onboarding_links(roster_row),
            "onboarding_complete": as_form_complete(roster_row.get("general_onboarding_complete")),
            "survey_urls": self.slot_survey_links(period.record_id),
        }
        # No deep link on a page that is already filtered to one student
        if self.config.public_schedule_url and not self.config.is_single_student_view:
            changes["public_schedule_url"] = public_schedule_link(
                self.config.public_schedule_url, period.student_key
            )
        return period.evolve(**changes)

    def join(self, students: Mapping[str, List[RotationPeriod]]) -> Dict[str, List[RotationPeriod]]:
        joined: Dict[str, List[RotationPeriod]] = {}
        missing_roster = 0
        missing_sites = 0

        for student_key, periods in students.items():
            roster_row = self.roster.get(student_key)
            if roster_row is None:
                stage_log.for_student(student_key).debug("No roster entry, contact fields left empty")
                missing_roster += 1
                roster_row = {}
            joined[student_key] = [self.join_period(p, roster_row) for p in periods]
            missing_sites += sum(1 for p in joined[student_key] if p.site_address == NO_ADDRESS_FOUND)

        if missing_roster:
            logger.warning(f"{missing_roster} students have no roster entry")
        if missing_sites:
            logger.info(f"{missing_sites} periods have no site address")
        return joined
