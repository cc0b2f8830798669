"""
Evaluation Matching

Joins preceptor evaluations to schedule periods. A record can only match a
period whose normalized start date equals the record's rotation start date.
Given that, it matches when its rotation id equals the period's record id
or contains the student key without its year prefix.

All matches are kept. The exposed score is the mean of the non-null,
non-zero scores; scalar fields come from the first match only. The one
exception is status: a preceptor evaluation counts as submitted when any
match is complete (RotationPeriod.preceptor_evaluation_submitted), so the
serialized preceptor_evaluation_complete can be False while the period is
still classified as evaluated.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..logging_config import StageLoggerAdapter
from ..models import EvaluationRecord, RotationPeriod
from .base import RecordMatcher, RotationIdMatcher, flatten_records

logger = logging.getLogger(__name__)
stage_log = StageLoggerAdapter(logger, {"stage": "evaluations"})


def mean_valid_score(records: Iterable[EvaluationRecord]) -> Optional[float]:
    """
    Arithmetic mean of scores, excluding null and zero.

    Returns None (not 0) when no valid score exists.
    """
    scores = [r.score for r in records if r.score]
    if not scores:
        return None
    return sum(scores) / len(scores)


class EvaluationMatcher:
    """
    Attaches evaluation matches and their aggregate to every period.

    Args:
        evaluation_payload: Evaluation source (record id -> nested data)
        rotation_matcher: (evaluation_row, student_key) -> matched?; defaults
            to rotation-id containment of the year-less student key
    """

    def __init__(
        self,
        evaluation_payload: Optional[Mapping[str, Any]] = None,
        rotation_matcher: Optional[RecordMatcher] = None,
    ):
        self.rotation_matcher = rotation_matcher or RotationIdMatcher()
        self._by_start_date: Dict[str, List[Tuple[Dict[str, Any], EvaluationRecord]]] = {}

        count = 0
        for row in flatten_records(evaluation_payload):
            if not row.get("rotation_id"):
                continue
            record = EvaluationRecord.from_row(row)
            if record.start_date is None:
                logger.debug(f"Evaluation {record.record_id} has no usable start date")
                continue
            self._by_start_date.setdefault(record.start_date, []).append((row, record))
            count += 1
        logger.debug(f"Indexed {count} evaluation rows")

    def matches_for(self, period: RotationPeriod) -> List[EvaluationRecord]:
        """Every evaluation matching the period, in discovery order."""
        if period.start_date is None:
            return []
        matches = []
        for row, record in self._by_start_date.get(period.start_date, []):
            if record.rotation_id == period.record_id or self.rotation_matcher(row, period.student_key):
                matches.append(record)
        return matches

    def enrich(self, period: RotationPeriod) -> RotationPeriod:
        matches = self.matches_for(period)
        if not matches:
            return period.evolve(evaluations=(), evaluation_score=None)

        primary = matches[0]
        if len(matches) > 1:
            stage_log.for_student(period.student_key).debug(
                f"{len(matches)} evaluations match period {period.month}, scalars taken from {primary.record_id}"
            )
        return period.evolve(
            evaluations=tuple(matches),
            evaluation_score=mean_valid_score(matches),
            preceptor_evaluation_complete=primary.preceptor_evaluation_complete,
            communication_complete=primary.communication_complete,
            preceptor_name=primary.preceptor_name,
        )

    def match(self, students: Mapping[str, List[RotationPeriod]]) -> Dict[str, List[RotationPeriod]]:
        result = {key: [self.enrich(p) for p in periods] for key, periods in students.items()}
        evaluated = sum(1 for periods in result.values() for p in periods if p.evaluations)
        logger.info(f"Evaluations attached to {evaluated} periods")
        return result
