"""Tests for the bounded retry helper."""
import pytest
from sqlalchemy.exc import IntegrityError

from church_attendance.core.retry import BoundedRetry


def _integrity_error():
    return IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))


@pytest.mark.unit
class TestBoundedRetry:

    def test_first_attempt_succeeds(self):
        outcome = BoundedRetry(3).run(lambda n: "ok")
        assert outcome.succeeded
        assert outcome.value == "ok"
        assert outcome.attempts == 1
        assert outcome.errors == []

    def test_retries_until_success(self):
        rollbacks = []

        def attempt(number):
            if number < 3:
                raise _integrity_error()
            return number

        outcome = BoundedRetry(5, on_retry=lambda: rollbacks.append(1)).run(attempt)
        assert outcome.value == 3
        assert outcome.attempts == 3
        assert len(outcome.errors) == 2
        assert len(rollbacks) == 2

    def test_gives_up_after_max_attempts(self):
        calls = []

        def attempt(number):
            calls.append(number)
            raise _integrity_error()

        outcome = BoundedRetry(4).run(attempt)
        assert not outcome.succeeded
        assert calls == [1, 2, 3, 4]
        assert outcome.attempts == 4
        assert len(outcome.errors) == 4

    def test_other_errors_propagate(self):
        def attempt(number):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            BoundedRetry(3).run(attempt)

    def test_requires_positive_attempts(self):
        with pytest.raises(ValueError):
            BoundedRetry(0)
