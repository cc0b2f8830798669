"""
Shared constants for the clerkship dashboard.
"""

# Academic-year slot sequence in calendar order. Slot numbers are labels,
# not calendar months: the year opens with slot 10.
SLOT_SEQUENCE = (10, 11, 12, 1, 2, 3, 4, 5, 6, 7, 8, 9)
FINAL_SLOT = SLOT_SEQUENCE[-1]

# Schedule month code -> the grading system's own period numbering
GRADE_PERIOD_MAP = {
    str(slot): str(index + 1) for index, slot in enumerate(SLOT_SEQUENCE)
}

# Placeholders
NO_ADDRESS_FOUND = "No Address Found"
NOT_AVAILABLE = "n/a"

# Grade block keys; every slot carries all six, possibly null
GRADE_FIELDS = (
    "case_module_complete",
    "patient_log_complete",
    "eor_score",
    "eor_retake_score",
    "eor_failed",
    "final_grade",
)

# Survey instruments linked per slot
SLOT_SURVEY_INSTRUMENTS = (
    "student_evaluation_of_preceptor",
    "site_confirmation",
)

# Form status value for a completed instrument
FORM_COMPLETE = "2"

# Status labels in precedence order
STATUS_COMPLETE = "complete-green"
STATUS_ONGOING = "ongoing-yellow"
STATUS_STARTED = "started-red"
STATUS_DEFAULT = "default-grey"
STATUS_UNCLASSIFIED = ""

STATUS_LABELS = (STATUS_COMPLETE, STATUS_ONGOING, STATUS_STARTED, STATUS_DEFAULT)


def slot_label(slot: int) -> str:
    """Display label for a slot ("Period 10")."""
    return f"Period {slot}"
