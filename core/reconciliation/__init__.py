"""
Multi-Source Reconciliation

This package joins the independently structured dashboard sources into one
per-student timeline of rotation periods.

Stages (in pipeline order):
- PeriodMerger: schedule events -> coalesced periods per student
- CrossReferenceJoiner: site address, roster metadata, survey links
- GradeMatcher: name-matched grading rows via period-number translation
- EvaluationMatcher: date-gated preceptor evaluations with a filtered mean

Each stage takes StudentKey -> [RotationPeriod] and returns new enriched
copies; nothing is mutated in place.

Usage:
    from core.reconciliation import merge_schedule, GradeMatcher

    students = merge_schedule(schedule_payload, year=2025)
    students = GradeMatcher(grade_payload).match(students)
"""

from .base import (
    NameContainmentMatcher,
    RecordMatcher,
    RotationIdMatcher,
    first_row,
    flatten_record,
    flatten_records,
    format_full_name,
    split_student_name,
    specialty_from_record_id,
    strip_year_prefix,
)
from .period_merger import (
    PeriodMerger,
    coalesce_periods,
    merge_schedule,
    period_from_event,
)
from .cross_reference import (
    CrossReferenceJoiner,
    build_roster,
    build_site_directory,
    public_schedule_link,
)
from .grade_matcher import (
    GradeMatcher,
    index_grade_source,
    translate_month,
)
from .evaluation_matcher import (
    EvaluationMatcher,
    mean_valid_score,
)

__all__ = [
    # Base
    "NameContainmentMatcher",
    "RecordMatcher",
    "RotationIdMatcher",
    "first_row",
    "flatten_record",
    "flatten_records",
    "format_full_name",
    "split_student_name",
    "specialty_from_record_id",
    "strip_year_prefix",
    # Period merger
    "PeriodMerger",
    "coalesce_periods",
    "merge_schedule",
    "period_from_event",
    # Cross reference
    "CrossReferenceJoiner",
    "build_roster",
    "build_site_directory",
    "public_schedule_link",
    # Grades
    "GradeMatcher",
    "index_grade_source",
    "translate_month",
    # Evaluations
    "EvaluationMatcher",
    "mean_valid_score",
]
