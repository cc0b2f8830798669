"""
Base Reconciliation Utilities

Shared pieces for joining source records that share no reliable key:
- Student-key parsing and display-name derivation
- Recursive flattening of nested repeated-instance payloads
- Pluggable matcher abstraction for the heuristic joins
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

SOURCE_RECORD_ID = "_source_record_id"

# "2025_" is five characters; everything after it is "Last, First"
YEAR_PREFIX_LENGTH = 5


# =============================================================================
# Student Key Utilities
# =============================================================================

def strip_year_prefix(student_key: str) -> str:
    """Return the part of a student key after the year and underscore."""
    return student_key[YEAR_PREFIX_LENGTH:]


def split_student_name(student_key: str) -> Optional[Tuple[str, str]]:
    """
    Split a student key into (last, first).

    Examples:
        "2025_Doe, Jane" -> ("Doe", "Jane")
        "2025_Cher"      -> None
    """
    parts = strip_year_prefix(student_key).split(',')
    if len(parts) != 2:
        return None
    return parts[0].strip(), parts[1].strip()


def format_full_name(student_key: str) -> Optional[str]:
    """Derive "First Last" by swapping the comma-separated name parts."""
    name = split_student_name(student_key)
    if name is None:
        return None
    last, first = name
    return f"{first} {last}"


def specialty_from_record_id(record_id: str) -> str:
    """Third underscore-separated part of a schedule record id, or ""."""
    parts = str(record_id).split('_')
    return parts[2] if len(parts) > 2 else ""


# =============================================================================
# Flattening
# =============================================================================

def _is_nested(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    if isinstance(value, (list, tuple)):
        return any(isinstance(item, (Mapping, list, tuple)) for item in value)
    return False


def _iter_leaves(node: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(node, Mapping):
        nested = [v for v in node.values() if _is_nested(v)]
        if not nested:
            if node:
                yield dict(node)
            return
        # Mixed node: scalar siblings form their own leaf, then descend
        scalars = {k: v for k, v in node.items() if not _is_nested(v)}
        if scalars:
            yield scalars
        for child in nested:
            yield from _iter_leaves(child)
    elif isinstance(node, (list, tuple)):
        for child in node:
            yield from _iter_leaves(child)


def flatten_record(record_id: str, record: Any) -> List[Dict[str, Any]]:
    """
    Flatten one source record into its leaf rows.

    A leaf is a mapping with no nested mappings or lists of mappings. Scalar
    keys that sit beside nested containers (e.g. event-level fields next to
    ``repeat_instances``) form a leaf of their own. Each leaf is tagged with
    the top-level record id.
    """
    leaves = []
    for leaf in _iter_leaves(record):
        leaf[SOURCE_RECORD_ID] = record_id
        leaves.append(leaf)
    return leaves


def flatten_records(payload: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten a whole source payload (record id -> nested data) in order."""
    if not payload:
        return []
    rows: List[Dict[str, Any]] = []
    for record_id, record in payload.items():
        rows.extend(flatten_record(str(record_id), record))
    return rows


def first_row(record_id: str, record: Any) -> Dict[str, Any]:
    """First leaf row of a record, or an empty dict."""
    rows = flatten_record(record_id, record)
    return rows[0] if rows else {}


# =============================================================================
# Matchers
# =============================================================================

class RecordMatcher(ABC):
    """
    Decides whether a source record belongs to a student.

    Matching is heuristic; implementations are swappable without touching
    the pipeline. Signature: (source_record, student_key) -> matched?
    """

    @abstractmethod
    def __call__(self, source_record: Mapping[str, Any], student_key: str) -> bool:
        pass


class NameContainmentMatcher(RecordMatcher):
    """
    Case-sensitive substring containment on first and last names.

    The key's first and last names must each be contained in the record's
    ``first_name`` and ``last_name``. Shared surnames and substring false
    positives ("Ann" in "Anna") are accepted collisions.
    """

    def __init__(self, first_field: str = "first_name", last_field: str = "last_name"):
        self.first_field = first_field
        self.last_field = last_field

    def __call__(self, source_record: Mapping[str, Any], student_key: str) -> bool:
        name = split_student_name(student_key)
        if name is None:
            return False
        last, first = name
        if not first or not last:
            return False
        record_first = str(source_record.get(self.first_field) or "")
        record_last = str(source_record.get(self.last_field) or "")
        return first in record_first and last in record_last


class RotationIdMatcher(RecordMatcher):
    """
    Matches an evaluation's ``rotation_id`` against a student key.

    True when the rotation id contains the key without its year prefix.
    Exact record-id equality is checked by the caller, since it needs the
    slot rather than the student.
    """

    def __init__(self, field_name: str = "rotation_id"):
        self.field_name = field_name

    def __call__(self, source_record: Mapping[str, Any], student_key: str) -> bool:
        fragment = strip_year_prefix(student_key)
        if not fragment:
            return False
        return fragment in str(source_record.get(self.field_name) or "")
