"""
Tests for core.reconciliation.base: key parsing, flattening, matchers.
"""

import pytest

from core.reconciliation.base import (
    SOURCE_RECORD_ID,
    NameContainmentMatcher,
    RecordMatcher,
    RotationIdMatcher,
    first_row,
    flatten_record,
    flatten_records,
    format_full_name,
    specialty_from_record_id,
    split_student_name,
    strip_year_prefix,
)


# ---------------------------------------------------------------------------
# Student keys
# ---------------------------------------------------------------------------

class TestStudentKeys:

    def test_strip_year_prefix(self):
        assert strip_year_prefix("2025_Doe, Jane") == "Doe, Jane"

    def test_split_student_name(self):
        assert split_student_name("2025_Doe, Jane") == ("Doe", "Jane")

    def test_split_without_comma(self):
        assert split_student_name("2025_Cher") is None

    def test_split_with_extra_comma(self):
        assert split_student_name("2025_Doe, Jane, Jr") is None

    def test_format_full_name_swaps_parts(self):
        assert format_full_name("2025_Doe, Jane") == "Jane Doe"

    def test_format_full_name_trims(self):
        assert format_full_name("2025_ Van Dyke ,  Dick ") == "Dick Van Dyke"

    @pytest.mark.parametrize("record_id,expected", [
        ("2025_Doe, Jane_PEDS", "PEDS"),
        ("2025_Doe, Jane", ""),
        ("42", ""),
    ])
    def test_specialty_from_record_id(self, record_id, expected):
        assert specialty_from_record_id(record_id) == expected


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------

class TestFlatten:

    def test_flat_record_is_one_leaf(self):
        rows = flatten_record("r1", {"a": 1, "b": "x"})
        assert rows == [{"a": 1, "b": "x", SOURCE_RECORD_ID: "r1"}]

    def test_event_rows(self):
        rows = flatten_record("r1", {"ev1": {"a": 1}, "ev2": {"a": 2}})
        assert [r["a"] for r in rows] == [1, 2]
        assert all(r[SOURCE_RECORD_ID] == "r1" for r in rows)

    def test_uneven_repeat_instances(self):
        record = {
            "event": {"first_name": "Jane"},
            "repeat_instances": {
                "event": {
                    "form_a": {"1": {"v": 1}, "2": {"v": 2}},
                    "form_b": {"1": {"nested": {"deeper": {"v": 3}}}},
                },
            },
        }
        rows = flatten_record("r1", record)
        assert rows[0]["first_name"] == "Jane"
        assert [r.get("v") for r in rows[1:]] == [1, 2, 3]

    def test_scalar_siblings_form_own_leaf(self):
        rows = flatten_record("r1", {"name": "x", "children": [{"v": 1}]})
        assert rows[0] == {"name": "x", SOURCE_RECORD_ID: "r1"}
        assert rows[1]["v"] == 1

    def test_lists_of_scalars_stay_in_leaf(self):
        rows = flatten_record("r1", {"tags": ["a", "b"]})
        assert rows[0]["tags"] == ["a", "b"]

    def test_empty_record(self):
        assert flatten_record("r1", {}) == []
        assert first_row("r1", {}) == {}

    def test_flatten_records_keeps_payload_order(self):
        rows = flatten_records({"b": {"v": 1}, "a": {"v": 2}})
        assert [r[SOURCE_RECORD_ID] for r in rows] == ["b", "a"]

    def test_flatten_none_payload(self):
        assert flatten_records(None) == []

    def test_source_untouched(self):
        record = {"ev": {"v": 1}}
        flatten_record("r1", record)
        assert record == {"ev": {"v": 1}}


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

class TestNameContainmentMatcher:

    def test_exact_names(self):
        matcher = NameContainmentMatcher()
        assert matcher({"first_name": "Jane", "last_name": "Doe"}, "2025_Doe, Jane")

    def test_substring_containment(self):
        matcher = NameContainmentMatcher()
        assert matcher({"first_name": "Jane Marie", "last_name": "Doe-Smith"}, "2025_Doe, Jane")

    def test_case_sensitive(self):
        matcher = NameContainmentMatcher()
        assert not matcher({"first_name": "jane", "last_name": "doe"}, "2025_Doe, Jane")

    def test_last_name_mismatch(self):
        matcher = NameContainmentMatcher()
        assert not matcher({"first_name": "Jane", "last_name": "Roe"}, "2025_Doe, Jane")

    def test_known_collision_is_accepted(self):
        matcher = NameContainmentMatcher()
        assert matcher({"first_name": "Anna", "last_name": "Lee"}, "2025_Lee, Ann")

    def test_unparseable_key(self):
        assert not NameContainmentMatcher()({"first_name": "Cher", "last_name": "Cher"}, "2025_Cher")

    def test_custom_fields(self):
        matcher = NameContainmentMatcher(first_field="given", last_field="family")
        assert matcher({"given": "Jane", "family": "Doe"}, "2025_Doe, Jane")


class TestRotationIdMatcher:

    def test_contains_key_without_year(self):
        assert RotationIdMatcher()({"rotation_id": "Doe, Jane - peds"}, "2025_Doe, Jane")

    def test_no_containment(self):
        assert not RotationIdMatcher()({"rotation_id": "Roe, Rick"}, "2025_Doe, Jane")

    def test_missing_rotation_id(self):
        assert not RotationIdMatcher()({}, "2025_Doe, Jane")


class TestPluggableMatcher:

    def test_subclass_can_replace_heuristic(self):
        class EmailMatcher(RecordMatcher):
            def __call__(self, source_record, student_key):
                return source_record.get("student_key") == student_key

        assert EmailMatcher()({"student_key": "2025_Doe, Jane"}, "2025_Doe, Jane")

    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            RecordMatcher()
