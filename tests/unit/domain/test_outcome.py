"""Tests for Outcome."""

import pytest

from chatwidgets.domain.errors import OutcomeAccessError
from chatwidgets.domain.outcome import Outcome, OutcomeError


class TestOutcome:
    """Test Outcome construction and access."""

    def test_ok_holds_value(self):
        """Test successful outcome exposes its value."""
        outcome = Outcome.ok("reply")

        assert outcome.is_ok is True
        assert outcome.is_error is False
        assert outcome.value == "reply"

    def test_fail_holds_error(self):
        """Test failed outcome exposes code and message."""
        outcome = Outcome.fail("NoAgent", "No agent found")

        assert outcome.is_error is True
        assert outcome.error == OutcomeError(code="NoAgent", message="No agent found")

    def test_value_of_failed_outcome_raises(self):
        """Test reading the value of a failed outcome raises."""
        outcome = Outcome.fail("NoMessage", "missing")

        with pytest.raises(OutcomeAccessError) as exc_info:
            _ = outcome.value

        assert exc_info.value.details["error_code"] == "NoMessage"

    def test_error_of_successful_outcome_raises(self):
        """Test reading the error of a successful outcome raises."""
        with pytest.raises(OutcomeAccessError):
            _ = Outcome.ok(1).error

    def test_ok_with_none_value_is_still_ok(self):
        """Test None is a legitimate success value."""
        outcome = Outcome.ok(None)

        assert outcome.is_ok is True
        assert outcome.value is None

    def test_match(self):
        """Test match folds both variants."""
        ok = Outcome.ok(2)
        failed = Outcome.fail("E", "bad")

        assert ok.match(lambda v: v * 10, lambda e: e.code) == 20
        assert failed.match(lambda v: v * 10, lambda e: e.code) == "E"

    def test_equality_and_repr(self):
        """Test outcomes compare by content."""
        assert Outcome.ok("a") == Outcome.ok("a")
        assert Outcome.fail("E", "m") == Outcome.fail("E", "m")
        assert Outcome.ok("a") != Outcome.fail("E", "m")
        assert repr(Outcome.fail("E", "m")) == "Outcome.fail('E', 'm')"


class TestOutcomeConstruction:
    """Test direct construction is limited to one variant."""

    def test_value_and_error_together_rejected(self):
        """Test an outcome cannot carry both a value and an error."""
        with pytest.raises(ValueError):
            Outcome(value=1, error=OutcomeError("X", "y"))

    def test_neither_value_nor_error_rejected(self):
        """Test an empty outcome cannot be built."""
        with pytest.raises(ValueError):
            Outcome()

    def test_ok_none_is_success(self):
        """Test None is a valid success value."""
        outcome = Outcome.ok(None)

        assert outcome.is_ok
        assert outcome.value is None
