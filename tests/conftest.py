"""Shared pytest configuration and fixtures for the test suite."""

import copy
from datetime import date

import pytest

from core.config import DashboardConfig


# ---------------------------------------------------------------------------
# Sample source payloads (record id -> nested events / repeat instances)
# ---------------------------------------------------------------------------

SAMPLE_SCHEDULE = {
    "2025_Doe, Jane_PEDS": {
        "rotation_arm_3": {
            "student_id": "2025_Doe, Jane",
            "month": "10",
            "start_date": "2024-04-01",
            "location": "Clinic_A",
            "student_evaluation_of_preceptor_complete": "2",
            "preceptor_email": "peds@example.edu",
        },
    },
    "2025_Doe, Jane_SURG": {
        "rotation_arm_3": {
            "student_id": "2025_Doe, Jane",
            "month": "11",
            "start_date": "2024-04-29",
            "location": "Hospital_B",
            "student_evaluation_of_preceptor_complete": "0",
        },
    },
    "2025_Doe, Jane_SURG2": {
        "rotation_arm_3": {
            "student_id": "2025_Doe, Jane",
            "month": "11",
            "start_date": "2024-04-30",
            "location": "Hospital_C",
        },
    },
    "2025_Roe, Rick_IM": {
        "rotation_arm_3": {
            "student_id": "2025_Roe, Rick",
            "month": "1",
            "start_date": "2024-07-01",
            "location": "Clinic_Z",
        },
    },
    "2024_Old, Olive_IM": {
        "rotation_arm_3": {
            "student_id": "2024_Old, Olive",
            "month": "10",
            "start_date": "2023-04-03",
            "location": "Clinic_A",
        },
    },
}

SAMPLE_SITES = {
    "Clinic_A": {
        "site_review_arm_5": {"site_name": "Clinic A"},
        "repeat_instances": {
            "site_review_arm_5": {
                "clinical_site_evaluation": {
                    "1": {"site_address": ""},
                    "2": {"site_address": "123 Main St"},
                    "3": {"site_address": "999 Later Ave"},
                },
            },
        },
    },
    "Hospital_B": {
        "repeat_instances": {
            "site_review_arm_5": {
                "clinical_site_evaluation": {
                    "1": {"site_address": "1 Hospital Way"},
                },
            },
        },
    },
}

SAMPLE_ROSTER = {
    "2025_Doe, Jane": {
        "student_arm_1": {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jdoe@example.edu",
            "schedule_url": "https://example.edu/schedule/jane",
            "lecture_evaluation_url": "https://example.edu/lectures/jane",
            "onboarding_url": "https://example.edu/onboarding/jane",
            "onboarding_badge_url": "https://example.edu/badge/jane",
            "general_onboarding_complete": "2",
        },
    },
}

SAMPLE_GRADES = {
    "G-100": {
        "grades_arm_1": {"first_name": "Jane Marie", "last_name": "Doe"},
        "repeat_instances": {
            "grades_arm_1": {
                "rotation_grades": {
                    "1": {
                        "grade_period": "1",
                        "case_module_complete": "1",
                        "patient_log_complete": "1",
                        "eor_score": "420",
                        "eor_retake_score": "",
                        "eor_failed": "0",
                        "final_grade": "Pass",
                    },
                    "2": {
                        "grade_period": "2",
                        "case_module_complete": "0",
                        "patient_log_complete": "1",
                        "eor_score": "350",
                        "eor_retake_score": "370",
                        "eor_failed": "1",
                        "final_grade": "",
                    },
                },
            },
        },
    },
    "G-200": {
        "grades_arm_1": {"first_name": "Rick", "last_name": "Roman"},
    },
}

SAMPLE_EVALUATIONS = {
    "E-1": {
        "repeat_instances": {
            "evaluation_arm_1": {
                "preceptor_evaluation": {
                    "1": {
                        "rotation_id": "2025_Doe, Jane_PEDS",
                        "rotation_start_date": "04/01/2024",
                        "preceptor_evaluation_complete": "2",
                        "communication_complete": "2",
                        "score": "4",
                        "preceptor_name": "Dr. First",
                    },
                    "2": {
                        "rotation_id": "Doe, Jane - pediatrics",
                        "rotation_start_date": "2024-04-01",
                        "preceptor_evaluation_complete": "0",
                        "communication_complete": "0",
                        "score": "5",
                        "preceptor_name": "Dr. Second",
                    },
                    "3": {
                        "rotation_id": "2025_Doe, Jane_PEDS",
                        "rotation_start_date": "2024-04-02",
                        "preceptor_evaluation_complete": "2",
                        "score": "1",
                    },
                },
            },
        },
    },
}

SAMPLE_SURVEY_LINKS = {
    "2025_Doe, Jane_PEDS": {
        "student_evaluation_of_preceptor": "https://example.edu/surveys/?s=PEDS",
    },
}


@pytest.fixture
def sample_payloads():
    """All sample sources keyed by source name (deep copies)."""
    return copy.deepcopy({
        "schedule": SAMPLE_SCHEDULE,
        "sites": SAMPLE_SITES,
        "roster": SAMPLE_ROSTER,
        "grades": SAMPLE_GRADES,
        "evaluations": SAMPLE_EVALUATIONS,
        "survey_links": SAMPLE_SURVEY_LINKS,
    })


@pytest.fixture
def config():
    """Config pinned to a fixed 'today' for reproducible classification."""
    return DashboardConfig(year=2025, today="2024-06-01", public_schedule_url="https://example.edu/public")


@pytest.fixture
def today():
    return date(2024, 6, 1)
