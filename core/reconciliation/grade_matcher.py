"""
Grade Matching

Joins schedule periods to the external grading source. The two spaces share
no key: schedule data is keyed by "{year}_{Last, First}", grading data by
its own record id with separate name fields. Records are paired by name,
then rows are paired to periods through the grading system's own period
numbering.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..constants import GRADE_PERIOD_MAP
from ..logging_config import StageLoggerAdapter
from ..models import GradeBlock, RotationPeriod
from .base import NameContainmentMatcher, RecordMatcher, first_row, flatten_record

logger = logging.getLogger(__name__)
stage_log = StageLoggerAdapter(logger, {"stage": "grades"})

GRADE_PERIOD_FIELD = "grade_period"


def translate_month(month: str) -> Optional[str]:
    """Schedule month code -> grading period number, None if unknown."""
    return GRADE_PERIOD_MAP.get(str(month).strip())


@dataclass
class GradeSourceRecord:
    """One grading record: its name row and its per-period rows."""
    record_id: str
    name_row: Dict[str, Any]
    rows: List[Dict[str, Any]] = field(default_factory=list)


def index_grade_source(grade_payload: Optional[Mapping[str, Any]]) -> List[GradeSourceRecord]:
    """Split every grading record into its name row and repeated grade rows."""
    records = []
    for record_id, record in (grade_payload or {}).items():
        rid = str(record_id)
        rows = [
            row for row in flatten_record(rid, record)
            if str(row.get(GRADE_PERIOD_FIELD) or "").strip()
        ]
        records.append(GradeSourceRecord(record_id=rid, name_row=first_row(rid, record), rows=rows))
    return records


class GradeMatcher:
    """
    Attaches a GradeBlock to every period.

    Args:
        grade_payload: Grading source (record id -> nested data)
        name_matcher: (name_row, student_key) -> matched?; defaults to
            case-sensitive first/last name containment
    """

    def __init__(
        self,
        grade_payload: Optional[Mapping[str, Any]] = None,
        name_matcher: Optional[RecordMatcher] = None,
    ):
        self.records = index_grade_source(grade_payload)
        self.name_matcher = name_matcher or NameContainmentMatcher()

    def records_for_student(self, student_key: str) -> List[GradeSourceRecord]:
        """Every grading record whose name pair matches the student."""
        return [r for r in self.records if self.name_matcher(r.name_row, student_key)]

    @staticmethod
    def find_row(period: RotationPeriod, rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """First row whose grading period matches the period's translated month."""
        target = translate_month(period.month)
        if target is None:
            return None
        for row in rows:
            if str(row.get(GRADE_PERIOD_FIELD)).strip() == target:
                return row
        return None

    def match_student(self, student_key: str, periods: List[RotationPeriod]) -> List[RotationPeriod]:
        log = stage_log.for_student(student_key)
        records = self.records_for_student(student_key)
        if not records:
            log.debug("No grading record matched by name")
        elif len(records) > 1:
            log.debug(f"{len(records)} grading records matched by name: {[r.record_id for r in records]}")
        rows = [row for record in records for row in record.rows]
        matched = []
        for period in periods:
            row = self.find_row(period, rows)
            grade = GradeBlock.from_row(row) if row is not None else GradeBlock.placeholder()
            matched.append(period.evolve(grade=grade))
        return matched

    def match(self, students: Mapping[str, List[RotationPeriod]]) -> Dict[str, List[RotationPeriod]]:
        result = {key: self.match_student(key, periods) for key, periods in students.items()}

        graded = sum(
            1 for periods in result.values() for p in periods
            if p.grade is not None and not p.grade.is_placeholder
        )
        unmatched = [key for key in students if not self.records_for_student(key)]
        logger.info(f"Grades attached to {graded} periods from {len(self.records)} grading records")
        if unmatched:
            logger.debug(f"No grading record for {len(unmatched)} students")
        return result
