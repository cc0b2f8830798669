"""
Data models for the reconciled student timeline.

Every model is a frozen dataclass. Enrichment stages never mutate a period;
they call ``evolve()`` and return the new copy, so each intermediate state
stays inspectable.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .constants import FORM_COMPLETE, GRADE_FIELDS, SLOT_SEQUENCE, STATUS_UNCLASSIFIED
from .date_utils import normalize_date

logger = logging.getLogger(__name__)

TRUTHY_VALUES = {"1", "2", "true", "yes", "y"}
FALSY_VALUES = {"0", "false", "no", "n"}


# =============================================================================
# Value Coercion
# =============================================================================

def as_flag(value: Any) -> Optional[bool]:
    """Coerce a source checkbox/radio value to a boolean, None if absent."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUTHY_VALUES:
        return True
    if text in FALSY_VALUES:
        return False
    return None


def as_number(value: Any) -> Optional[float]:
    """Coerce a source numeric value, None if absent or not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        logger.debug(f"Non-numeric value ignored: {text!r}")
        return None


def as_form_complete(value: Any) -> Optional[bool]:
    """
    Decode an instrument status field (0 Incomplete, 1 Unverified, 2 Complete).

    Only Complete counts; None if absent.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text == FORM_COMPLETE


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# =============================================================================
# Grades & Evaluations
# =============================================================================

@dataclass(frozen=True)
class GradeBlock:
    """Academic scores for one slot. All six keys are always present."""
    case_module_complete: Optional[bool] = None
    patient_log_complete: Optional[bool] = None
    eor_score: Optional[float] = None
    eor_retake_score: Optional[float] = None
    eor_failed: Optional[bool] = None
    final_grade: Optional[str] = None

    @classmethod
    def placeholder(cls) -> "GradeBlock":
        """All-null block for slots without a matching grade row."""
        return cls()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "GradeBlock":
        return cls(
            case_module_complete=as_flag(row.get("case_module_complete")),
            patient_log_complete=as_flag(row.get("patient_log_complete")),
            eor_score=as_number(row.get("eor_score")),
            eor_retake_score=as_number(row.get("eor_retake_score")),
            eor_failed=as_flag(row.get("eor_failed")),
            final_grade=as_text(row.get("final_grade")),
        )

    @property
    def is_placeholder(self) -> bool:
        return all(getattr(self, name) is None for name in GRADE_FIELDS)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in GRADE_FIELDS}


@dataclass(frozen=True)
class EvaluationRecord:
    """One preceptor evaluation of a student's rotation."""
    record_id: str
    rotation_id: str
    start_date: Optional[str]
    preceptor_evaluation_complete: bool = False
    communication_complete: bool = False
    score: Optional[float] = None
    preceptor_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "EvaluationRecord":
        return cls(
            record_id=str(row.get("_source_record_id", "")),
            rotation_id=str(row.get("rotation_id") or ""),
            start_date=normalize_date(row.get("rotation_start_date")),
            preceptor_evaluation_complete=bool(as_form_complete(row.get("preceptor_evaluation_complete"))),
            communication_complete=bool(as_form_complete(row.get("communication_complete"))),
            score=as_number(row.get("score")),
            preceptor_name=as_text(row.get("preceptor_name")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "rotation_id": self.rotation_id,
            "start_date": self.start_date,
            "preceptor_evaluation_complete": self.preceptor_evaluation_complete,
            "communication_complete": self.communication_complete,
            "score": self.score,
            "preceptor_name": self.preceptor_name,
        }


# =============================================================================
# Classification
# =============================================================================

@dataclass(frozen=True)
class StatusFlags:
    """Derived booleans behind a slot's status. Never persisted."""
    rotation_started: bool = False
    rotation_ended: bool = False
    started_or_today: bool = False
    student_evaluation_complete: bool = False
    preceptor_evaluation_complete: bool = False
    case_module_complete: bool = False
    case_module_exempt: bool = False
    patient_log_complete: bool = False
    score_satisfactory: bool = False
    communication_complete: bool = False
    exam_failed: bool = False
    exam_passed: bool = False
    retake_score_low: bool = False
    onboarding_complete: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass(frozen=True)
class StatusResult:
    """Classifier output: label, contributing criteria, flag snapshot."""
    label: str = STATUS_UNCLASSIFIED
    criteria: Tuple[str, ...] = ()
    flags: StatusFlags = field(default_factory=StatusFlags)

    @property
    def is_classified(self) -> bool:
        return bool(self.label)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "criteria": list(self.criteria),
            "flags": self.flags.to_dict(),
        }


# =============================================================================
# Rotation Period & Student
# =============================================================================

@dataclass(frozen=True)
class RotationPeriod:
    """One slot of one student's schedule, enriched stage by stage."""
    student_key: str
    record_id: str
    month: str
    start_date: Optional[str] = None
    location: str = ""
    # First-seen location; survives coalescing and keys the site lookup
    primary_location: str = ""
    full_name: Optional[str] = None
    specialty: str = ""
    student_evaluation_complete: bool = False

    # Cross-reference joiner
    site_address: Optional[str] = None
    email: Optional[str] = None
    schedule_url: Optional[str] = None
    lecture_evaluation_url: Optional[str] = None
    onboarding_urls: Tuple[str, ...] = ()
    onboarding_complete: Optional[bool] = None
    public_schedule_url: Optional[str] = None
    survey_urls: Mapping[str, Optional[str]] = field(default_factory=dict)

    # Grade matcher
    grade: Optional[GradeBlock] = None

    # Evaluation matcher
    evaluations: Tuple[EvaluationRecord, ...] = ()
    evaluation_score: Optional[float] = None
    preceptor_evaluation_complete: Optional[bool] = None
    communication_complete: Optional[bool] = None
    preceptor_name: Optional[str] = None

    # Remaining instrument fields as exported
    fields: Mapping[str, Any] = field(default_factory=dict)

    # Status classifier
    status: Optional[StatusResult] = None

    @property
    def slot(self) -> Optional[int]:
        """Slot number (1-12), None when the month code is not a slot."""
        try:
            value = int(str(self.month).strip())
        except ValueError:
            return None
        return value if value in SLOT_SEQUENCE else None

    @property
    def site_location(self) -> str:
        return self.primary_location or self.location

    @property
    def preceptor_evaluation_submitted(self) -> bool:
        """True if any matched evaluation is complete, not just the first."""
        return any(e.preceptor_evaluation_complete for e in self.evaluations)

    @property
    def is_classified(self) -> bool:
        return self.status is not None

    def evolve(self, **changes: Any) -> "RotationPeriod":
        """Return an enriched copy. Classified periods are immutable."""
        if self.status is not None:
            raise ValueError(
                f"Period {self.month} of {self.student_key} is already classified"
            )
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable flat view; structured keys override raw fields."""
        result: Dict[str, Any] = dict(self.fields)
        result.update({
            "record_id": self.record_id,
            "student_id": self.student_key,
            "month": self.month,
            "slot": self.slot,
            "start_date": self.start_date,
            "location": self.location,
            "primary_location": self.site_location,
            "full_name": self.full_name,
            "specialty": self.specialty,
            "student_evaluation_complete": self.student_evaluation_complete,
            "site_address": self.site_address,
            "email": self.email,
            "schedule_url": self.schedule_url,
            "lecture_evaluation_url": self.lecture_evaluation_url,
            "onboarding_urls": list(self.onboarding_urls),
            "onboarding_complete": self.onboarding_complete,
            "public_schedule_url": self.public_schedule_url,
            "survey_urls": dict(self.survey_urls),
            "grade": (self.grade or GradeBlock.placeholder()).to_dict(),
            "evaluations": [e.to_dict() for e in self.evaluations],
            "evaluation_score": self.evaluation_score,
            "preceptor_evaluation_complete": self.preceptor_evaluation_complete,
            "preceptor_evaluation_submitted": self.preceptor_evaluation_submitted,
            "communication_complete": self.communication_complete,
            "preceptor_name": self.preceptor_name,
        })
        if self.status is not None:
            result["status"] = self.status.to_dict()
        return result


@dataclass(frozen=True)
class Student:
    """A student and their periods in first-seen order."""
    key: str
    periods: Tuple[RotationPeriod, ...] = ()

    @property
    def full_name(self) -> str:
        for period in self.periods:
            if period.full_name:
                return period.full_name
        return "Unknown"

    @property
    def email(self) -> Optional[str]:
        return next((p.email for p in self.periods if p.email), None)

    def in_slot_order(self) -> List[RotationPeriod]:
        """Periods ordered by the academic slot sequence; unknown slots last."""
        def position(period: RotationPeriod) -> int:
            slot = period.slot
            return SLOT_SEQUENCE.index(slot) if slot is not None else len(SLOT_SEQUENCE)
        return sorted(self.periods, key=position)

    def period_for_slot(self, slot: int) -> Optional[RotationPeriod]:
        return next((p for p in self.periods if p.slot == slot), None)
