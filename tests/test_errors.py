"""
Tests for core.errors: DashboardError hierarchy.

Validates:
- Hierarchy relationships (isinstance checks)
- Structured to_dict() output
- Cause chaining
- UnknownActionError carries the rejected action
"""

import pytest
from core.errors import (
    DashboardError,
    ConfigurationError,
    SourceError,
    SourceUnavailableError,
    MalformedSourceError,
    RequestError,
    UnknownActionError,
)


# ── Hierarchy ────────────────────────────────────────────────────────

class TestHierarchy:
    """All errors inherit from DashboardError and Exception."""

    @pytest.mark.parametrize("cls", [
        ConfigurationError,
        SourceError, SourceUnavailableError, MalformedSourceError,
        RequestError,
    ])
    def test_is_dashboard_error(self, cls):
        err = cls("test")
        assert isinstance(err, DashboardError)
        assert isinstance(err, Exception)

    def test_unknown_action_is_request_error(self):
        err = UnknownActionError("doThing")
        assert isinstance(err, RequestError)
        assert isinstance(err, DashboardError)

    def test_source_subtypes(self):
        assert issubclass(SourceUnavailableError, SourceError)
        assert issubclass(MalformedSourceError, SourceError)


# ── Attributes ───────────────────────────────────────────────────────

class TestAttributes:
    """Test stage, source, cause attributes."""

    def test_base_attributes(self):
        err = DashboardError("boom", stage="grades", source="grades")
        assert str(err) == "boom"
        assert err.stage == "grades"
        assert err.source == "grades"
        assert err.cause is None

    def test_cause_chaining(self):
        original = ValueError("bad json")
        err = MalformedSourceError("parse failed", cause=original)
        assert err.cause is original
        assert err.__cause__ is original

    def test_defaults(self):
        assert str(SourceUnavailableError()) == "Source unavailable"
        assert str(MalformedSourceError()) == "Malformed source payload"

    def test_unknown_action_message(self):
        err = UnknownActionError("deleteEverything")
        assert err.action == "deleteEverything"
        assert str(err) == "Action deleteEverything is not defined"


# ── to_dict ──────────────────────────────────────────────────────────

class TestToDict:
    """Structured output for logging."""

    def test_minimal(self):
        d = DashboardError("oops").to_dict()
        assert d == {"error_type": "DashboardError", "message": "oops"}

    def test_full(self):
        cause = OSError("disk gone")
        err = SourceUnavailableError(
            "could not read schedule",
            stage="schedule",
            source="schedule",
            cause=cause,
        )
        d = err.to_dict()
        assert d["error_type"] == "SourceUnavailableError"
        assert d["message"] == "could not read schedule"
        assert d["stage"] == "schedule"
        assert d["source"] == "schedule"
        assert "OSError: disk gone" in d["cause"]

    def test_unknown_action_includes_action(self):
        d = UnknownActionError("foo", stage="request").to_dict()
        assert d["action"] == "foo"
        assert d["stage"] == "request"


# ── Catch patterns ───────────────────────────────────────────────────

class TestCatchPatterns:
    """Verify real-world except clauses work as expected."""

    def test_catch_all_dashboard_errors(self):
        with pytest.raises(DashboardError):
            raise SourceUnavailableError()

    def test_catch_source_errors(self):
        with pytest.raises(SourceError):
            raise MalformedSourceError("not a mapping")

    def test_catch_as_exception(self):
        with pytest.raises(Exception):
            raise ConfigurationError("bad year")
