"""
Date parsing helpers.

Source systems export dates in several layouts; everything inside the core
works on normalized ``YYYY-MM-DD`` strings. Unparseable input never raises,
it yields None so callers can degrade to their placeholder.
"""

import logging
from datetime import date, datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
)


def parse_date(value: Any) -> Optional[date]:
    """Parse a source date value, or return None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Unparseable date: {text!r}")
    return None


def normalize_date(value: Any) -> Optional[str]:
    """Normalize a source date value to YYYY-MM-DD, or return None."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def month_day(value: date) -> str:
    """Format as M/D without zero padding."""
    return f"{value.month}/{value.day}"
