"""
Core reconciliation and classification for the clerkship dashboard.

This module consolidates the pure, in-memory pieces of the dashboard:
- Data models and constants
- Request-scoped configuration
- Multi-source reconciliation stages
- Status classification and the period calendar
"""

from .config import DashboardConfig, load_config
from .constants import (
    NO_ADDRESS_FOUND,
    NOT_AVAILABLE,
    SLOT_SEQUENCE,
    STATUS_COMPLETE,
    STATUS_DEFAULT,
    STATUS_ONGOING,
    STATUS_STARTED,
    STATUS_UNCLASSIFIED,
)
from .errors import (
    DashboardError,
    ConfigurationError,
    SourceError,
    SourceUnavailableError,
    MalformedSourceError,
    RequestError,
    UnknownActionError,
)
from .models import (
    EvaluationRecord,
    GradeBlock,
    RotationPeriod,
    StatusFlags,
    StatusResult,
    Student,
)
from .period_calendar import extract_start_dates, generate_period_dates
from .status_classifier import classify_period, classify_students, compute_flags

__all__ = [
    # Config
    "DashboardConfig",
    "load_config",
    # Constants
    "NO_ADDRESS_FOUND",
    "NOT_AVAILABLE",
    "SLOT_SEQUENCE",
    "STATUS_COMPLETE",
    "STATUS_DEFAULT",
    "STATUS_ONGOING",
    "STATUS_STARTED",
    "STATUS_UNCLASSIFIED",
    # Errors
    "DashboardError",
    "ConfigurationError",
    "SourceError",
    "SourceUnavailableError",
    "MalformedSourceError",
    "RequestError",
    "UnknownActionError",
    # Models
    "EvaluationRecord",
    "GradeBlock",
    "RotationPeriod",
    "StatusFlags",
    "StatusResult",
    "Student",
    # Calendar & classification
    "extract_start_dates",
    "generate_period_dates",
    "classify_period",
    "classify_students",
    "compute_flags",
]
