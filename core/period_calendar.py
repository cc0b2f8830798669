"""
Period Calendar

Computes the start/end display strings for the twelve fixed academic slots.
The academic year spans two calendar years, so the two-digit year is shown
once, on the first slot whose start falls in a new calendar year.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Mapping, Optional

from .constants import FINAL_SLOT, NOT_AVAILABLE, SLOT_SEQUENCE, slot_label
from .date_utils import month_day, parse_date
from .models import RotationPeriod

logger = logging.getLogger(__name__)

DEFAULT_OFFSET_DAYS = 23
FINAL_SLOT_REDUCTION = 7


def extract_start_dates(
    students: Mapping[str, Iterable[RotationPeriod]],
) -> Dict[int, Optional[str]]:
    """
    One canonical start date per slot: the first parseable date seen.

    Slots nobody is scheduled in map to None.
    """
    start_dates: Dict[int, Optional[str]] = {slot: None for slot in SLOT_SEQUENCE}
    for periods in students.values():
        for period in periods:
            slot = period.slot
            if slot is None or start_dates[slot] is not None:
                continue
            if parse_date(period.start_date) is not None:
                start_dates[slot] = period.start_date
    return start_dates


def _lookup(start_dates: Mapping[Any, Any], slot: int) -> Any:
    if slot in start_dates:
        return start_dates[slot]
    return start_dates.get(str(slot))


def generate_period_dates(
    start_dates: Mapping[Any, Any],
    offset_days: int = DEFAULT_OFFSET_DAYS,
    final_slot_reduction: int = FINAL_SLOT_REDUCTION,
) -> Dict[str, Dict[str, str]]:
    """
    Build {"Period N": {"start": ..., "end": ...}} in academic order.

    Args:
        start_dates: Slot number (int or str) -> start date
        offset_days: Days from start to end of a rotation
        final_slot_reduction: Days removed from the offset for the final slot

    Returns:
        Ordered mapping of slot label to display strings; "n/a" for both
        strings when a start date is missing or unparseable.
    """
    period_dates: Dict[str, Dict[str, str]] = {}
    previous_year: Optional[int] = None
    year_shown = False

    for slot in SLOT_SEQUENCE:
        start: Optional[date] = parse_date(_lookup(start_dates, slot))
        if start is None:
            period_dates[slot_label(slot)] = {"start": NOT_AVAILABLE, "end": NOT_AVAILABLE}
            continue

        offset = offset_days - final_slot_reduction if slot == FINAL_SLOT else offset_days
        end = start + timedelta(days=offset)

        start_text = month_day(start)
        if previous_year is not None and start.year != previous_year and not year_shown:
            start_text = f"{start_text}/{start.strftime('%y')}"
            year_shown = True
        previous_year = start.year

        period_dates[slot_label(slot)] = {"start": start_text, "end": month_day(end)}

    missing = [label for label, dates in period_dates.items() if dates["start"] == NOT_AVAILABLE]
    if missing:
        logger.debug(f"No start date for {', '.join(missing)}")
    return period_dates
