"""
Retry driver — re-run a failing operation with backoff, return an Outcome.

    data, error = await neat_catch_retry(
        lambda: client.get(url),
        RetryOptions(max_retries=2, delay=100, backoff=Backoff.LINEAR),
    )

Attempt n (1-based) runs the operation through neat_catch without any error
transformer, so `should_retry` always sees the raw failure. After a failure:

    last attempt or should_retry(error, n) is False  →  stop, report the failure
    otherwise                                        →  sleep, attempt n + 1

The reported failure goes through `error_transformer(error, n)` when one is
configured, n being the attempt that ended the run.

Backoff between attempts (n = the attempt that just failed):

    exponential: delay * 2 ** (n - 1)     100 → 100, 200, 400, ...
    linear:      delay * n                100 → 100, 200, 300, ...

The attempt loop is driven by tenacity; its retry predicate makes every stop
decision, so stop_after_attempt only bounds the loop.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    stop_after_attempt,
    wait_exponential,
    wait_incrementing,
)

from neat_catch.catch import neat_catch_async
from neat_catch.errors import TransformError, UnexpectedRetryExit
from neat_catch.outcome import Failure, Outcome
from neat_catch.transform import transform_error

T = TypeVar("T")
logger = logging.getLogger("neat_catch.retry")


class Backoff(str, Enum):
    """Growth policy of the wait between attempts."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"


def _always_retry(error: Any, attempt: int) -> bool:
    return True


class RetryOptions(BaseModel):
    """
    Immutable retry configuration. Every field is optional.

    `delay` is in milliseconds. `max_retries` counts retries after the first
    attempt, so the operation runs at most max_retries + 1 times.
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0, description="Retries after the initial attempt")
    delay: float = Field(default=1000, ge=0, description="Base backoff unit in milliseconds")
    backoff: Backoff = Field(default=Backoff.EXPONENTIAL)
    error_transformer: Callable[[Any, int], Any] | None = Field(
        default=None,
        description="Applied to the final failure with the attempt that produced it",
    )
    should_retry: Callable[[Any, int], bool] = Field(
        default=_always_retry,
        description="Consulted with the raw failure and attempt before every retry",
    )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_settings(cls, settings: Any = None, **overrides: Any) -> RetryOptions:
        """
        Build options whose numeric defaults come from NeatCatchSettings.

            # NEAT_CATCH_RETRY__MAX_RETRIES=5 in the environment
            options = RetryOptions.from_settings(should_retry=is_transient)
        """
        from neat_catch.config import get_settings

        defaults = (settings or get_settings()).retry
        values: dict[str, Any] = {
            "max_retries": defaults.max_retries,
            "delay": defaults.delay,
            "backoff": defaults.backoff,
        }
        values.update(overrides)
        return cls(**values)


def _wait_strategy(delay: float, backoff: Backoff | str) -> wait_exponential | wait_incrementing:
    """tenacity wait for the backoff, in seconds."""
    base = delay / 1000
    if Backoff(backoff) is Backoff.EXPONENTIAL:
        return wait_exponential(multiplier=base, exp_base=2, min=0)
    return wait_incrementing(start=base, increment=base)


def compute_delay(delay: float, backoff: Backoff | str, attempt: int) -> float:
    """
    Wait in milliseconds after `attempt` (1-based) failed, as scheduled by the driver.

        >>> compute_delay(100, Backoff.EXPONENTIAL, 3)
        400.0
        >>> compute_delay(100, Backoff.LINEAR, 3)
        300.0
    """
    state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
    state.attempt_number = attempt
    return round(_wait_strategy(delay, backoff)(state) * 1000, 6)


class _RetryRun:
    """State of a single neat_catch_retry call. Never shared between calls."""

    def __init__(self, fn: Callable[[], Awaitable[T] | T], options: RetryOptions) -> None:
        self._fn = fn
        self._options = options
        self.attempt = 0
        self.predicate_error: Exception | None = None
        self.exited_unexpectedly = False

    async def run_attempt(self) -> Outcome[Any, Any]:
        self.attempt += 1
        return await neat_catch_async(self._fn)

    def should_continue(self, retry_state: RetryCallState) -> bool:
        """tenacity retry predicate: decide whether attempt n + 1 happens."""
        if retry_state.outcome is None or retry_state.outcome.failed:
            return False
        outcome: Outcome[Any, Any] = retry_state.outcome.result()
        if outcome.is_success():
            return False

        attempt = retry_state.attempt_number
        if attempt == self._options.total_attempts:
            return False
        try:
            return bool(self._options.should_retry(outcome.error(), attempt))
        except Exception as e:
            logger.warning("should_retry raised on attempt %d: %s", attempt, e)
            self.predicate_error = e
            return False

    def log_wait(self, retry_state: RetryCallState) -> None:
        wait_seconds = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.debug(
            "Attempt %d/%d failed, retrying in %.0fms",
            retry_state.attempt_number,
            self._options.total_attempts,
            wait_seconds * 1000,
        )

    def on_unexpected_exit(self, retry_state: RetryCallState) -> Outcome[Any, Any]:
        """Terminal for a loop that ran out of attempts while still retrying."""
        logger.error(
            "Retry loop exited after %d attempts without a final outcome",
            retry_state.attempt_number,
        )
        self.exited_unexpectedly = True
        return Failure(UnexpectedRetryExit(attempts=retry_state.attempt_number))

    def finalize(self, outcome: Outcome[Any, Any]) -> Outcome[Any, Any]:
        """Turn the last attempt's outcome into the reported one."""
        if outcome.is_success() or self.exited_unexpectedly:
            return outcome

        failure = outcome.error()
        if self.predicate_error is not None:
            return Failure(TransformError(failure, self.predicate_error))
        if self._options.error_transformer is None:
            return outcome
        return Failure(transform_error(failure, self._options.error_transformer, self.attempt))


async def neat_catch_retry(
    fn: Callable[[], Awaitable[T] | T],
    options: RetryOptions | None = None,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Outcome[T, Any]:
    """
    Run `fn` until it succeeds, `should_retry` refuses, or attempts run out.

    Never raises for operation, transformer or predicate failures; the result
    is always an Outcome. `sleep` receives seconds and defaults to
    asyncio.sleep.
    """
    options = options or RetryOptions()
    run = _RetryRun(fn, options)

    retrying = AsyncRetrying(
        sleep=sleep,
        stop=stop_after_attempt(options.total_attempts),
        wait=_wait_strategy(options.delay, options.backoff),
        retry=run.should_continue,
        before_sleep=run.log_wait,
        retry_error_callback=run.on_unexpected_exit,
    )
    outcome = await retrying(run.run_attempt)
    return run.finalize(outcome)
