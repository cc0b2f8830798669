"""
Period Merger

Folds raw per-slot schedule events into one ordered period list per
student. Events for the same student and month are coalesced: locations are
joined with "; " and every other field keeps its first-seen value,
including ``primary_location``, which the site lookup uses.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..date_utils import normalize_date
from ..models import RotationPeriod, as_form_complete
from .base import (
    SOURCE_RECORD_ID,
    flatten_records,
    format_full_name,
    specialty_from_record_id,
)

logger = logging.getLogger(__name__)

LOCATION_SEPARATOR = "; "

# Event fields consumed into typed RotationPeriod attributes
CONSUMED_FIELDS = {
    SOURCE_RECORD_ID,
    "record_id",
    "student_id",
    "month",
    "start_date",
    "location",
    "full_name",
    "student_evaluation_of_preceptor_complete",
}


def period_from_event(event: Mapping[str, Any]) -> RotationPeriod:
    """Build an unenriched RotationPeriod from one flattened schedule event."""
    student_key = str(event["student_id"])
    record_id = str(event.get(SOURCE_RECORD_ID) or event.get("record_id") or "")
    full_name = format_full_name(student_key) or event.get("full_name") or None
    location = str(event.get("location") or "")

    return RotationPeriod(
        student_key=student_key,
        record_id=record_id,
        month=str(event.get("month")).strip(),
        start_date=normalize_date(event.get("start_date")),
        location=location,
        primary_location=location,
        full_name=full_name,
        specialty=specialty_from_record_id(record_id),
        student_evaluation_complete=bool(
            as_form_complete(event.get("student_evaluation_of_preceptor_complete"))
        ),
        fields={k: v for k, v in event.items() if k not in CONSUMED_FIELDS},
    )


def coalesce_periods(periods: Iterable[RotationPeriod]) -> List[RotationPeriod]:
    """
    Coalesce periods sharing a month, keeping first-encountered month order.

    Applying this to its own output returns an equal list.
    """
    merged: List[RotationPeriod] = []
    index_by_month: Dict[str, int] = {}

    for period in periods:
        position = index_by_month.get(period.month)
        if position is None:
            index_by_month[period.month] = len(merged)
            merged.append(period)
            continue

        existing = merged[position]
        merged[position] = existing.evolve(
            location=f"{existing.location}{LOCATION_SEPARATOR}{period.location}"
        )
        logger.debug(
            f"Coalesced duplicate month {period.month} for {period.student_key} "
            f"(record {period.record_id})"
        )

    return merged


class PeriodMerger:
    """
    Merges schedule events for one academic year.

    Args:
        year: Academic year; only keys starting with it are kept
        student_id: Optional single-student filter (full student key)
    """

    def __init__(self, year: int, student_id: Optional[str] = None):
        self.year = str(year)
        self.student_id = student_id

    def accepts(self, event: Mapping[str, Any]) -> bool:
        """True if the event belongs to the requested year (and student)."""
        student_key = event.get("student_id")
        if not student_key or not str(student_key).startswith(self.year):
            return False
        if self.student_id and str(student_key) != self.student_id:
            return False
        month = event.get("month")
        return month is not None and str(month).strip() != ""

    def merge(self, events: Iterable[Mapping[str, Any]]) -> Dict[str, List[RotationPeriod]]:
        """
        Group accepted events by student key and coalesce duplicate months.

        Returns:
            StudentKey -> periods in first-encountered month order
        """
        grouped: Dict[str, List[RotationPeriod]] = {}
        skipped = 0

        for event in events:
            if not self.accepts(event):
                skipped += 1
                continue
            period = period_from_event(event)
            grouped.setdefault(period.student_key, []).append(period)

        students = {key: coalesce_periods(periods) for key, periods in grouped.items()}

        logger.info(
            f"Merged {sum(len(p) for p in students.values())} periods for "
            f"{len(students)} students ({skipped} events outside filter)"
        )
        return students


def merge_schedule(
    schedule_payload: Optional[Mapping[str, Any]],
    year: int,
    student_id: Optional[str] = None,
) -> Dict[str, List[RotationPeriod]]:
    """Convenience function: flatten a schedule payload and merge it."""
    events = flatten_records(schedule_payload)
    return PeriodMerger(year, student_id=student_id).merge(events)
