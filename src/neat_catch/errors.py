"""
Error taxonomy — what can end up in the error slot of an Outcome.

Three kinds of failure are distinguished:
  - OPERATION_FAILURE: the wrapped operation raised (or its awaitable failed)
  - TRANSFORM_FAILURE: the operation failed AND a caller-supplied hook handling
    that failure raised too (the error transformer, or a retry driver's
    should_retry predicate)
  - UNEXPECTED_EXIT: the retry loop ended without a decision (invariant violation)

Only the last two have dedicated types; an operation failure is whatever the
operation raised, passed through (or transformed) untouched.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any


@unique
class FailureKind(Enum):
    """Classification of values found in an Outcome's error slot."""

    OPERATION_FAILURE = "OPERATION_FAILURE"
    """The operation itself failed; the error slot holds its (transformed) failure."""

    TRANSFORM_FAILURE = "TRANSFORM_FAILURE"
    """
    A caller hook raised while handling an operation failure.

    The hook is the error transformer, or `should_retry` in neat_catch_retry;
    in both cases `secondary` on the TransformError is the hook's exception.
    """

    UNEXPECTED_EXIT = "UNEXPECTED_EXIT"
    """The retry driver left its loop without success or a final failure."""

    @staticmethod
    def classify(error: Any) -> FailureKind:
        """
        Tell which kind of failure an error slot value represents.

        >>> FailureKind.classify(ValueError("bad"))
        <FailureKind.OPERATION_FAILURE: 'OPERATION_FAILURE'>
        """
        match error:
            case TransformError():
                return FailureKind.TRANSFORM_FAILURE
            case UnexpectedRetryExit():
                return FailureKind.UNEXPECTED_EXIT
            case _:
                return FailureKind.OPERATION_FAILURE


class TransformError(Exception):
    """
    Aggregate failure produced when an error transformer raises.

    Carries both the original failure (`primary`) and the transformer's own
    exception (`secondary`), so a consumer can tell "the operation failed"
    apart from "the operation failed and so did the error transform".

        match error:
            case TransformError(primary=original, secondary=transform_exc):
                ...
    """

    __match_args__ = ("primary", "secondary")

    kind = FailureKind.TRANSFORM_FAILURE

    def __init__(self, primary: Any, secondary: BaseException) -> None:
        super().__init__(
            "Error transforming error. Both errors are in the 'errors' property."
        )
        self.primary = primary
        self.secondary = secondary

    @property
    def errors(self) -> tuple[Any, BaseException]:
        """Both failures, original first."""
        return (self.primary, self.secondary)

    def __repr__(self) -> str:
        return f"TransformError(primary={self.primary!r}, secondary={self.secondary!r})"


class UnexpectedRetryExit(Exception):
    """Returned (never raised) when the retry loop exits without a decision."""

    kind = FailureKind.UNEXPECTED_EXIT

    def __init__(self, message: str = "Unexpected retry loop exit", attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts
