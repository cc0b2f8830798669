"""
Pipeline orchestrator for the dashboard reconciliation.

Runs the stages in dependency order for one request:

    schedule → PeriodMerger → CrossReferenceJoiner → GradeMatcher
             → EvaluationMatcher → status classification

The period calendar runs independently off the merged periods.

Everything is rebuilt from the sources on every run; no state is shared
between runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.config import DashboardConfig
from core.errors import SourceError
from core.logging_config import StageLoggerAdapter
from core.models import RotationPeriod, Student
from core.period_calendar import extract_start_dates, generate_period_dates
from core.reconciliation import (
    CrossReferenceJoiner,
    EvaluationMatcher,
    GradeMatcher,
    RecordMatcher,
    build_roster,
    build_site_directory,
    merge_schedule,
)
from core.status_classifier import classify_students
from sources.base import (
    EVALUATIONS,
    GRADES,
    ROSTER,
    SCHEDULE,
    SITES,
    SURVEY_LINKS,
    SourceAdapter,
)

logger = logging.getLogger(__name__)

# Sources whose failure degrades to an empty payload
OPTIONAL_SOURCES = (SITES, ROSTER, GRADES, EVALUATIONS, SURVEY_LINKS)


@dataclass
class PipelineResult:
    """Result of one dashboard pipeline run."""
    students: Dict[str, List[RotationPeriod]] = field(default_factory=dict)
    period_dates: Dict[str, Dict[str, str]] = field(default_factory=dict)
    stage_counts: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def student_views(self) -> List[Student]:
        """Students in first-seen order. Sorting is left to the caller."""
        return [Student(key=key, periods=tuple(periods)) for key, periods in self.students.items()]

    def students_to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serializable StudentKey -> ordered period list."""
        return {
            key: [period.to_dict() for period in periods]
            for key, periods in self.students.items()
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'students': self.students_to_dict(),
            'periodDates': self.period_dates,
            'stageCounts': self.stage_counts,
            'warnings': self.warnings,
        }


class DashboardPipeline:
    """
    Runs the reconciliation stages against one source adapter.

    Args:
        config: Request-scoped configuration
        adapter: Source adapter supplying the nested payloads
        name_matcher: Optional replacement for grade-source name matching
        rotation_matcher: Optional replacement for evaluation rotation-id matching
    """

    def __init__(
        self,
        config: DashboardConfig,
        adapter: SourceAdapter,
        name_matcher: Optional[RecordMatcher] = None,
        rotation_matcher: Optional[RecordMatcher] = None,
    ):
        self.config = config
        self.adapter = adapter
        self.name_matcher = name_matcher
        self.rotation_matcher = rotation_matcher

    def _fetch_optional(self, source: str, result: PipelineResult) -> Dict[str, Any]:
        try:
            return self.adapter.fetch(source)
        except SourceError as e:
            message = f"Source '{source}' unavailable, continuing without it: {e}"
            logger.warning(message)
            result.warnings.append(message)
            return {}

    def merge(self) -> Dict[str, List[RotationPeriod]]:
        """Fetch and merge the schedule. Schedule failures propagate."""
        schedule = self.adapter.fetch(SCHEDULE)
        return merge_schedule(schedule, self.config.year, student_id=self.config.student_id)

    def run(self, viewer_is_privileged: bool = True) -> PipelineResult:
        """
        Run every stage and classify each period.

        Raises:
            SourceUnavailableError: the schedule source could not be read
        """
        result = PipelineResult()
        today = self.config.resolve_today()

        log = StageLoggerAdapter(logger, {'stage': SCHEDULE})
        log.info(f"Building dashboard for {self.config.year} as of {today.isoformat()}")

        students = self.merge()
        result.stage_counts['students'] = len(students)
        result.stage_counts['periods'] = sum(len(p) for p in students.values())

        # The calendar depends only on the merged start dates
        result.period_dates = generate_period_dates(
            extract_start_dates(students),
            offset_days=self.config.rotation_offset_days,
            final_slot_reduction=self.config.final_slot_offset_reduction,
        )

        payloads = {source: self._fetch_optional(source, result) for source in OPTIONAL_SOURCES}

        log = StageLoggerAdapter(logger, {'stage': 'cross_reference'})
        joiner = CrossReferenceJoiner(
            self.config,
            sites=build_site_directory(payloads[SITES]),
            roster=build_roster(payloads[ROSTER]),
            survey_links=payloads[SURVEY_LINKS],
        )
        students = joiner.join(students)
        log.debug(f"Joined {len(joiner.sites)} sites and {len(joiner.roster)} roster rows")

        grade_matcher = GradeMatcher(payloads[GRADES], name_matcher=self.name_matcher)
        students = grade_matcher.match(students)
        result.stage_counts['graded_periods'] = sum(
            1 for periods in students.values() for p in periods
            if p.grade is not None and not p.grade.is_placeholder
        )

        evaluation_matcher = EvaluationMatcher(
            payloads[EVALUATIONS], rotation_matcher=self.rotation_matcher
        )
        students = evaluation_matcher.match(students)
        result.stage_counts['evaluated_periods'] = sum(
            1 for periods in students.values() for p in periods if p.evaluations
        )

        result.students = classify_students(
            students,
            viewer_is_privileged=viewer_is_privileged,
            today=today,
            config=self.config,
        )
        result.stage_counts['classified_periods'] = sum(
            1 for periods in result.students.values() for p in periods
            if p.status is not None and p.status.is_classified
        )

        log = StageLoggerAdapter(logger, {'stage': 'summary'})
        log.info(
            f"Dashboard ready: {result.stage_counts['students']} students, "
            f"{result.stage_counts['periods']} periods, {len(result.warnings)} warnings"
        )
        return result


def run_dashboard(
    config: DashboardConfig,
    adapter: SourceAdapter,
    viewer_is_privileged: bool = True,
) -> PipelineResult:
    """Convenience function: build a pipeline and run it once."""
    return DashboardPipeline(config, adapter).run(viewer_is_privileged=viewer_is_privileged)
