"""
Status Classification

Maps an enriched RotationPeriod to one of the dashboard status labels.
Classification is a pure function of the period's own flags; no other slot
is consulted.

Precedence (first match wins):
    1. complete-green   rotation ended and every certification criterion met
    2. ongoing-yellow   started, and either all work done except
                        communication, or the exam-failed flag is set
    3. started-red      started (inclusive of today) with missing work or a
                        low retake score
    4. default-grey     started (inclusive of today), nothing above matched
    5. unclassified     future or undated slot

Rules 1-2 compare the start date with "<", rules 3-4 with "<=".

Rule 2 joins an AND-group with the unrelated exam-failed flag, so a failed
exam outranks missing work. It is applied literally; the intent is unclear.
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

from .config import DashboardConfig
from .constants import (
    STATUS_COMPLETE,
    STATUS_DEFAULT,
    STATUS_ONGOING,
    STATUS_STARTED,
    STATUS_UNCLASSIFIED,
)
from .date_utils import parse_date
from .models import GradeBlock, RotationPeriod, StatusFlags, StatusResult

logger = logging.getLogger(__name__)


def compute_flags(
    period: RotationPeriod,
    today: date,
    config: Optional[DashboardConfig] = None,
) -> StatusFlags:
    """Derive the boolean predicates used by the precedence rules."""
    config = config or DashboardConfig()
    grade = period.grade or GradeBlock.placeholder()
    start = parse_date(period.start_date)

    retake = grade.eor_retake_score
    retake_score_low = retake is not None and retake < config.retake_threshold
    exam_failed = bool(grade.eor_failed)

    score = period.evaluation_score

    return StatusFlags(
        rotation_started=start is not None and start < today,
        rotation_ended=(
            start is not None
            and start + timedelta(days=config.rotation_end_days) < today
        ),
        started_or_today=start is not None and start <= today,
        student_evaluation_complete=period.student_evaluation_complete,
        preceptor_evaluation_complete=period.preceptor_evaluation_submitted,
        case_module_complete=bool(grade.case_module_complete),
        case_module_exempt=period.specialty in config.case_module_exempt_specialties,
        patient_log_complete=bool(grade.patient_log_complete),
        score_satisfactory=score is not None and score > config.satisfactory_score,
        communication_complete=bool(period.communication_complete),
        exam_failed=exam_failed,
        exam_passed=not exam_failed and not retake_score_low,
        retake_score_low=retake_score_low,
        onboarding_complete=period.onboarding_complete,
    )


# =============================================================================
# Rules
# =============================================================================

def _complete_rule(f: StatusFlags) -> Optional[List[str]]:
    case_module = f.case_module_complete or f.case_module_exempt
    if not (
        f.rotation_ended
        and f.student_evaluation_complete
        and f.preceptor_evaluation_complete
        and case_module
        and f.patient_log_complete
        and f.score_satisfactory
        and f.communication_complete
        and f.exam_passed
    ):
        return None
    return [
        "rotation_ended",
        "student_evaluation_complete",
        "preceptor_evaluation_complete",
        "case_module_complete" if f.case_module_complete else "case_module_exempt",
        "patient_log_complete",
        "score_satisfactory",
        "communication_complete",
        "exam_passed",
    ]


def _ongoing_rule(f: StatusFlags) -> Optional[List[str]]:
    if not f.rotation_started:
        return None
    awaiting_communication = (
        f.student_evaluation_complete
        and f.preceptor_evaluation_complete
        and f.case_module_complete
        and f.patient_log_complete
        and not f.communication_complete
    )
    if not (awaiting_communication or f.exam_failed):
        return None

    criteria = ["rotation_started"]
    if awaiting_communication:
        criteria.extend([
            "student_evaluation_complete",
            "preceptor_evaluation_complete",
            "case_module_complete",
            "patient_log_complete",
            "communication_pending",
        ])
    if f.exam_failed:
        criteria.append("exam_failed")
    return criteria


def _started_rule(f: StatusFlags) -> Optional[List[str]]:
    if not f.started_or_today:
        return None
    missing = []
    if not f.student_evaluation_complete:
        missing.append("student_evaluation_missing")
    if not f.preceptor_evaluation_complete:
        missing.append("preceptor_evaluation_missing")
    if not f.case_module_complete:
        missing.append("case_module_missing")
    if not f.patient_log_complete:
        missing.append("patient_log_missing")
    if f.retake_score_low:
        missing.append("retake_score_low")
    if not missing:
        return None
    return ["started_or_today"] + missing


def _default_rule(f: StatusFlags) -> Optional[List[str]]:
    return ["started_or_today"] if f.started_or_today else None


RULES = (
    (STATUS_COMPLETE, _complete_rule),
    (STATUS_ONGOING, _ongoing_rule),
    (STATUS_STARTED, _started_rule),
    (STATUS_DEFAULT, _default_rule),
)


def resolve_status(flags: StatusFlags) -> Tuple[str, Tuple[str, ...]]:
    """Apply the rules in precedence order to a flag snapshot."""
    for label, rule in RULES:
        criteria = rule(flags)
        if criteria is not None:
            return label, tuple(criteria)
    return STATUS_UNCLASSIFIED, ()


def classify_period(
    period: RotationPeriod,
    viewer_is_privileged: bool = True,
    today: Optional[date] = None,
    config: Optional[DashboardConfig] = None,
) -> StatusResult:
    """
    Classify one enriched period.

    Non-privileged viewers get an empty label and criteria list; the flag
    snapshot is computed regardless.
    """
    config = config or DashboardConfig()
    today = today or config.resolve_today()

    flags = compute_flags(period, today, config)
    label, criteria = resolve_status(flags)

    if not viewer_is_privileged:
        return StatusResult(label=STATUS_UNCLASSIFIED, criteria=(), flags=flags)
    return StatusResult(label=label, criteria=criteria, flags=flags)


def classify_students(
    students: Mapping[str, List[RotationPeriod]],
    viewer_is_privileged: bool = True,
    today: Optional[date] = None,
    config: Optional[DashboardConfig] = None,
) -> Dict[str, List[RotationPeriod]]:
    """Attach a StatusResult to every period. Returned periods are final."""
    config = config or DashboardConfig()
    today = today or config.resolve_today()

    classified = {}
    counts = {}
    for key, periods in students.items():
        result = []
        for period in periods:
            status = classify_period(period, viewer_is_privileged, today, config)
            result.append(period.evolve(status=status))
            counts[status.label or "unclassified"] = counts.get(status.label or "unclassified", 0) + 1
        classified[key] = result

    logger.info(f"Classified periods as of {today.isoformat()}: {counts}")
    return classified
