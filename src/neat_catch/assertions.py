"""
Test assertions for Outcome values.

Expressive assert helpers that produce clear failure messages:

    from neat_catch import OutcomeAssertions

    def test_parse_config():
        outcome = neat_catch(lambda: parse(raw))
        config = OutcomeAssertions.assert_success(outcome)
        assert config.name == "prod"

    def test_rejects_garbage():
        outcome = neat_catch(lambda: parse("garbage"))
        OutcomeAssertions.assert_failure(outcome, ValueError)
        OutcomeAssertions.assert_failure_message_contains(outcome, "invalid")
"""

from __future__ import annotations

from typing import Any, TypeVar

from neat_catch.errors import FailureKind
from neat_catch.outcome import Outcome

T = TypeVar("T")


class OutcomeAssertions:
    """Expressive test assertions for Outcome values."""

    @staticmethod
    def assert_success(outcome: Outcome[T, Any], message: str = "") -> T:
        """
        Assert the Outcome is a Success and return the value.

            value = OutcomeAssertions.assert_success(outcome)
        """
        context = f" — {message}" if message else ""
        assert outcome.is_success(), f"Expected Success but got Failure({outcome.err!r}){context}"
        return outcome.value()

    @staticmethod
    def assert_failure(
        outcome: Outcome[Any, Any],
        expected_type: type | None = None,
        message: str = "",
    ) -> Any:
        """
        Assert the Outcome is a Failure, optionally checking the error's type.

            error = OutcomeAssertions.assert_failure(outcome, ValueError)
        """
        context = f" — {message}" if message else ""
        assert outcome.is_failure(), f"Expected Failure but got Success({outcome.data!r}){context}"
        error = outcome.error()
        if expected_type is not None:
            assert isinstance(error, expected_type), (
                f"Expected error of type {expected_type.__name__} "
                f"but got {type(error).__name__}: {error!r}{context}"
            )
        return error

    @staticmethod
    def assert_failure_kind(outcome: Outcome[Any, Any], expected_kind: FailureKind) -> None:
        """Assert the Outcome is a Failure of the given kind."""
        error = OutcomeAssertions.assert_failure(outcome)
        actual = FailureKind.classify(error)
        assert actual is expected_kind, (
            f"Expected failure kind {expected_kind.value} but got {actual.value}: {error!r}"
        )

    @staticmethod
    def assert_failure_message_contains(outcome: Outcome[Any, Any], substring: str) -> None:
        """Assert that str(error) contains the given substring (case-insensitive)."""
        error = OutcomeAssertions.assert_failure(outcome)
        assert substring.lower() in str(error).lower(), (
            f"Expected failure message to contain {substring!r} but message was: {str(error)!r}"
        )

    @staticmethod
    def assert_success_value(outcome: Outcome[Any, Any], expected_value: Any) -> None:
        """Assert the Outcome is a Success with the specific value."""
        value = OutcomeAssertions.assert_success(outcome)
        assert value == expected_value, (
            f"Expected success value {expected_value!r} but got {value!r}"
        )
