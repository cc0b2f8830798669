"""
Tests for core.models and core.date_utils.
"""

from datetime import date

import pytest

from core.date_utils import month_day, normalize_date, parse_date
from core.models import (
    GradeBlock,
    RotationPeriod,
    StatusResult,
    Student,
    EvaluationRecord,
    as_flag,
    as_form_complete,
    as_number,
)


class TestCoercion:

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("2", True), ("Yes", True), (True, True),
        ("0", False), ("no", False),
        (None, None), ("", None), ("maybe", None),
    ])
    def test_as_flag(self, value, expected):
        assert as_flag(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("4", 4.0), (" 3.5 ", 3.5), (5, 5.0), ("", None), ("abc", None), (None, None), (True, None),
    ])
    def test_as_number(self, value, expected):
        assert as_number(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("2", True), (2, True), (" 2 ", True),
        ("1", False), ("0", False), ("Yes", False),
        (None, None), ("", None),
    ])
    def test_as_form_complete(self, value, expected):
        assert as_form_complete(value) is expected


class TestEvaluationRecord:

    def test_unverified_form_is_not_complete(self):
        record = EvaluationRecord.from_row({
            "rotation_id": "x",
            "preceptor_evaluation_complete": "1",
            "communication_complete": "1",
        })
        assert record.preceptor_evaluation_complete is False
        assert record.communication_complete is False

    def test_complete_form(self):
        record = EvaluationRecord.from_row({
            "rotation_id": "x",
            "preceptor_evaluation_complete": "2",
            "communication_complete": "2",
        })
        assert record.preceptor_evaluation_complete is True
        assert record.communication_complete is True


class TestDates:

    @pytest.mark.parametrize("value", [
        "2025-01-06", "2025-01-06 08:00", "01/06/2025", "1/6/25", date(2025, 1, 6),
    ])
    def test_parse_date_formats(self, value):
        assert parse_date(value) == date(2025, 1, 6)

    def test_unparseable(self):
        assert parse_date("next week") is None
        assert normalize_date("") is None

    def test_month_day_unpadded(self):
        assert month_day(date(2025, 1, 6)) == "1/6"


class TestRotationPeriod:

    def test_slot(self):
        assert RotationPeriod(student_key="k", record_id="r", month="10").slot == 10
        assert RotationPeriod(student_key="k", record_id="r", month="13").slot is None
        assert RotationPeriod(student_key="k", record_id="r", month="x").slot is None

    def test_evolve_returns_copy(self):
        period = RotationPeriod(student_key="k", record_id="r", month="10")
        evolved = period.evolve(location="A")
        assert evolved.location == "A"
        assert period.location == ""

    def test_classified_period_is_final(self):
        period = RotationPeriod(student_key="k", record_id="r", month="10").evolve(status=StatusResult())
        with pytest.raises(ValueError):
            period.evolve(location="A")

    def test_to_dict_structured_keys_win(self):
        period = RotationPeriod(
            student_key="k", record_id="r", month="10",
            fields={"location": "raw", "extra": 1},
            location="merged",
        )
        data = period.to_dict()
        assert data["location"] == "merged"
        assert data["extra"] == 1
        assert data["grade"] == GradeBlock.placeholder().to_dict()
        assert "status" not in data

    def test_site_location_falls_back_to_location(self):
        period = RotationPeriod(student_key="k", record_id="r", month="10", location="A")
        assert period.site_location == "A"
        assert period.evolve(primary_location="P").site_location == "P"

    def test_preceptor_evaluation_submitted_from_any_match(self):
        evaluations = (
            EvaluationRecord(record_id="e", rotation_id="r", start_date=None, preceptor_evaluation_complete=False),
            EvaluationRecord(record_id="e", rotation_id="r", start_date=None, preceptor_evaluation_complete=True),
        )
        period = RotationPeriod(
            student_key="k", record_id="r", month="10",
            evaluations=evaluations, preceptor_evaluation_complete=False,
        )
        data = period.to_dict()
        assert data["preceptor_evaluation_complete"] is False
        assert data["preceptor_evaluation_submitted"] is True


class TestStudent:

    def _periods(self):
        return (
            RotationPeriod(student_key="k", record_id="a", month="2", full_name="Jane Doe"),
            RotationPeriod(student_key="k", record_id="b", month="11", email="j@x"),
            RotationPeriod(student_key="k", record_id="c", month="1"),
        )

    def test_slot_order_view(self):
        student = Student(key="k", periods=self._periods())
        assert [p.month for p in student.periods] == ["2", "11", "1"]
        assert [p.month for p in student.in_slot_order()] == ["11", "1", "2"]

    def test_name_and_email(self):
        student = Student(key="k", periods=self._periods())
        assert student.full_name == "Jane Doe"
        assert student.email == "j@x"
        assert Student(key="k").full_name == "Unknown"

    def test_period_for_slot(self):
        student = Student(key="k", periods=self._periods())
        assert student.period_for_slot(11).record_id == "b"
        assert student.period_for_slot(5) is None
