"""
Unit tests for neat_catch_retry — the retry driver.

A recording sleep is injected so no test actually waits; the recorded
seconds double as the observed backoff schedule.

Test categories:
  - Attempt counting: early success, exhaustion, zero retries
  - should_retry: short-circuit, attempt numbers, raising predicate
  - Backoff: exponential and linear schedules, compute_delay
  - error_transformer: final-attempt numbering, raising transformer
  - RetryOptions validation and settings-backed defaults
  - Defensive loop-exit terminal
"""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from neat_catch import (
    Backoff,
    FailureKind,
    OutcomeAssertions,
    RetryOptions,
    Success,
    TransformError,
    UnexpectedRetryExit,
    compute_delay,
    neat_catch_retry,
)
from neat_catch.retry import _RetryRun


def _failing_then(value, failures: int, error: Exception | None = None) -> AsyncMock:
    """AsyncMock that raises `failures` times, then returns `value`."""
    error = error or RuntimeError("transient")
    return AsyncMock(side_effect=[error] * failures + [value])


class TestAttemptCounting:
    @pytest.mark.asyncio
    async def test_succeeds_on_first_attempt_without_retries(self, recording_sleep):
        fn = AsyncMock(return_value="success")
        data, error = await neat_catch_retry(fn, sleep=recording_sleep)
        assert data == "success"
        assert error is None
        assert fn.await_count == 1
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_succeeds_after_some_retries(self, recording_sleep):
        fn = _failing_then("success", failures=2)
        data, error = await neat_catch_retry(fn, RetryOptions(delay=100), sleep=recording_sleep)
        assert data == "success"
        assert error is None
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_fails_after_all_retries_exhausted(self, recording_sleep):
        mock_error = RuntimeError("always fails")
        fn = AsyncMock(side_effect=mock_error)
        data, error = await neat_catch_retry(
            fn, RetryOptions(max_retries=2, delay=100), sleep=recording_sleep
        )
        assert data is None
        assert error is mock_error
        assert fn.await_count == 3
        assert len(recording_sleep.calls) == 2

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt_and_no_wait(self, recording_sleep):
        mock_error = ValueError("once")
        fn = AsyncMock(side_effect=mock_error)
        data, error = await neat_catch_retry(fn, RetryOptions(max_retries=0), sleep=recording_sleep)
        assert data is None
        assert error is mock_error
        assert fn.await_count == 1
        assert recording_sleep.calls == []

    @pytest.mark.asyncio
    async def test_custom_max_retries(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("nope"))
        await neat_catch_retry(fn, RetryOptions(max_retries=5, delay=1), sleep=recording_sleep)
        assert fn.await_count == 6

    @pytest.mark.asyncio
    async def test_different_error_types_are_all_retried(self, recording_sleep):
        fn = AsyncMock(side_effect=[ValueError("a"), ConnectionError("b"), "success"])
        data, _ = await neat_catch_retry(fn, RetryOptions(delay=10), sleep=recording_sleep)
        assert data == "success"
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_sync_operation_is_supported(self, recording_sleep):
        fn = MagicMock(side_effect=[OSError("disk"), 12])
        outcome = await neat_catch_retry(fn, RetryOptions(delay=10), sleep=recording_sleep)
        assert outcome == Success(12)
        assert fn.call_count == 2

    @pytest.mark.asyncio
    async def test_successful_none_stops_retrying(self, recording_sleep):
        fn = AsyncMock(return_value=None)
        outcome = await neat_catch_retry(fn, sleep=recording_sleep)
        assert outcome.is_success()
        assert fn.await_count == 1


class TestShouldRetry:
    @pytest.mark.asyncio
    async def test_short_circuits_when_predicate_refuses(self, recording_sleep):
        retryable = ConnectionError("retryable")
        non_retryable = PermissionError("non-retryable")
        fn = AsyncMock(side_effect=[retryable, non_retryable, "never"])

        data, error = await neat_catch_retry(
            fn,
            RetryOptions(
                max_retries=3,
                delay=10,
                should_retry=lambda e, attempt: isinstance(e, ConnectionError),
            ),
            sleep=recording_sleep,
        )
        assert data is None
        assert error is non_retryable
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_predicate_receives_raw_error_and_attempt(self, recording_sleep):
        mock_error = RuntimeError("raw")
        should_retry = MagicMock(side_effect=lambda e, attempt: attempt < 3)
        fn = AsyncMock(side_effect=mock_error)

        data, error = await neat_catch_retry(
            fn,
            RetryOptions(
                max_retries=5,
                delay=10,
                should_retry=should_retry,
                error_transformer=lambda e, attempt: "transformed",
            ),
            sleep=recording_sleep,
        )
        assert error == "transformed"
        assert fn.await_count == 3
        assert [c.args for c in should_retry.call_args_list] == [
            (mock_error, 1),
            (mock_error, 2),
            (mock_error, 3),
        ]

    @pytest.mark.asyncio
    async def test_predicate_not_consulted_on_last_attempt(self, recording_sleep):
        should_retry = MagicMock(return_value=True)
        fn = AsyncMock(side_effect=RuntimeError("x"))
        await neat_catch_retry(
            fn, RetryOptions(max_retries=1, delay=1, should_retry=should_retry), sleep=recording_sleep
        )
        assert should_retry.call_count == 1

    @pytest.mark.asyncio
    async def test_raising_predicate_stops_and_reports_transform_error(self, recording_sleep):
        mock_error = RuntimeError("op failed")

        def broken(error, attempt):
            raise KeyError("predicate bug")

        fn = AsyncMock(side_effect=mock_error)
        outcome = await neat_catch_retry(
            fn, RetryOptions(max_retries=3, delay=1, should_retry=broken), sleep=recording_sleep
        )
        error = OutcomeAssertions.assert_failure(outcome, TransformError)
        assert error.primary is mock_error
        assert isinstance(error.secondary, KeyError)
        assert fn.await_count == 1
        OutcomeAssertions.assert_failure_kind(outcome, FailureKind.TRANSFORM_FAILURE)


class TestBackoff:
    @pytest.mark.asyncio
    async def test_exponential_backoff_by_default(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("x"))
        await neat_catch_retry(fn, RetryOptions(max_retries=3, delay=100), sleep=recording_sleep)
        assert recording_sleep.calls_ms == pytest.approx([100, 200, 400])

    @pytest.mark.asyncio
    async def test_linear_backoff(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("x"))
        await neat_catch_retry(
            fn,
            RetryOptions(max_retries=3, delay=100, backoff=Backoff.LINEAR),
            sleep=recording_sleep,
        )
        assert recording_sleep.calls_ms == pytest.approx([100, 200, 300])

    @pytest.mark.asyncio
    async def test_backoff_accepts_string_value(self, recording_sleep):
        fn = _failing_then("success", failures=2)
        data, _ = await neat_catch_retry(
            fn, RetryOptions(delay=50, backoff="linear"), sleep=recording_sleep
        )
        assert data == "success"
        assert recording_sleep.calls_ms == pytest.approx([50, 100])

    @pytest.mark.asyncio
    async def test_zero_delay_still_retries(self, recording_sleep):
        fn = _failing_then("ok", failures=1)
        data, _ = await neat_catch_retry(fn, RetryOptions(delay=0), sleep=recording_sleep)
        assert data == "ok"
        assert recording_sleep.calls == [0.0]

    def test_compute_delay_exponential(self):
        assert compute_delay(100, Backoff.EXPONENTIAL, 1) == 100
        assert compute_delay(100, Backoff.EXPONENTIAL, 2) == 200
        assert compute_delay(100, Backoff.EXPONENTIAL, 3) == 400

    def test_compute_delay_linear(self):
        assert compute_delay(100, Backoff.LINEAR, 1) == 100
        assert compute_delay(100, "linear", 2) == 200
        assert compute_delay(100, Backoff.LINEAR, 3) == 300

    @pytest.mark.asyncio
    async def test_waits_match_compute_delay(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("x"))
        await neat_catch_retry(fn, RetryOptions(max_retries=4, delay=30), sleep=recording_sleep)
        expected = [compute_delay(30, Backoff.EXPONENTIAL, n) for n in range(1, 5)]
        assert recording_sleep.calls_ms == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_linear_waits_match_compute_delay(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("x"))
        await neat_catch_retry(
            fn, RetryOptions(max_retries=3, delay=70, backoff=Backoff.LINEAR), sleep=recording_sleep
        )
        expected = [compute_delay(70, Backoff.LINEAR, n) for n in range(1, 4)]
        assert expected == pytest.approx([70, 140, 210])
        assert recording_sleep.calls_ms == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_logs_each_scheduled_wait(self, recording_sleep, caplog):
        fn = _failing_then("ok", failures=2)
        with caplog.at_level(logging.DEBUG, logger="neat_catch.retry"):
            await neat_catch_retry(fn, RetryOptions(delay=100), sleep=recording_sleep)
        assert "Attempt 1/4 failed, retrying in 100ms" in caplog.text
        assert "Attempt 2/4 failed, retrying in 200ms" in caplog.text


class TestErrorTransformer:
    @pytest.mark.asyncio
    async def test_transformer_receives_final_attempt_number(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("original error"))
        data, error = await neat_catch_retry(
            fn,
            RetryOptions(
                max_retries=1,
                delay=10,
                error_transformer=lambda e, attempt: f"Attempt {attempt}: {e}",
            ),
            sleep=recording_sleep,
        )
        assert data is None
        assert error == "Attempt 2: original error"

    @pytest.mark.asyncio
    async def test_transformer_uses_attempt_that_ended_the_run(self, recording_sleep):
        fn = AsyncMock(side_effect=RuntimeError("x"))
        _, error = await neat_catch_retry(
            fn,
            RetryOptions(
                max_retries=5,
                delay=1,
                should_retry=lambda e, attempt: attempt < 2,
                error_transformer=lambda e, attempt: attempt,
            ),
            sleep=recording_sleep,
        )
        assert error == 2

    @pytest.mark.asyncio
    async def test_transformer_called_once(self, recording_sleep):
        transformer = MagicMock(return_value="final")
        fn = AsyncMock(side_effect=RuntimeError("x"))
        await neat_catch_retry(
            fn, RetryOptions(max_retries=2, delay=1, error_transformer=transformer), sleep=recording_sleep
        )
        transformer.assert_called_once()

    @pytest.mark.asyncio
    async def test_transformer_not_called_on_success(self, recording_sleep):
        transformer = MagicMock()
        fn = _failing_then("ok", failures=1)
        await neat_catch_retry(
            fn, RetryOptions(delay=1, error_transformer=transformer), sleep=recording_sleep
        )
        transformer.assert_not_called()

    @pytest.mark.asyncio
    async def test_raising_transformer_is_contained(self, recording_sleep):
        mock_error = RuntimeError("x")

        def broken(error, attempt):
            raise ValueError("transformer bug")

        fn = AsyncMock(side_effect=mock_error)
        outcome = await neat_catch_retry(
            fn, RetryOptions(max_retries=0, error_transformer=broken), sleep=recording_sleep
        )
        OutcomeAssertions.assert_failure_kind(outcome, FailureKind.TRANSFORM_FAILURE)
        assert outcome.err.primary is mock_error


class TestRetryOptions:
    def test_defaults(self):
        options = RetryOptions()
        assert options.max_retries == 3
        assert options.delay == 1000
        assert options.backoff is Backoff.EXPONENTIAL
        assert options.error_transformer is None
        assert options.should_retry(RuntimeError("x"), 1) is True
        assert options.total_attempts == 4

    def test_is_frozen(self):
        options = RetryOptions()
        with pytest.raises(ValidationError):
            options.max_retries = 10  # type: ignore[misc]

    def test_rejects_negative_max_retries(self):
        with pytest.raises(ValidationError):
            RetryOptions(max_retries=-1)

    def test_rejects_negative_delay(self):
        with pytest.raises(ValidationError):
            RetryOptions(delay=-5)

    def test_rejects_unknown_backoff(self):
        with pytest.raises(ValidationError):
            RetryOptions(backoff="fibonacci")

    def test_rejects_non_callable_predicate(self):
        with pytest.raises(ValidationError):
            RetryOptions(should_retry="yes")

    def test_from_settings_uses_environment(self, monkeypatch):
        monkeypatch.setenv("NEAT_CATCH_RETRY__MAX_RETRIES", "7")
        monkeypatch.setenv("NEAT_CATCH_RETRY__BACKOFF", "linear")
        options = RetryOptions.from_settings(delay=5)
        assert options.max_retries == 7
        assert options.backoff is Backoff.LINEAR
        assert options.delay == 5

    def test_from_settings_defaults_match_documented_defaults(self):
        options = RetryOptions.from_settings()
        assert (options.max_retries, options.delay, options.backoff) == (
            3,
            1000,
            Backoff.EXPONENTIAL,
        )


class TestUnexpectedExit:
    def test_terminal_returns_failure_instead_of_raising(self):
        run = _RetryRun(AsyncMock(), RetryOptions(max_retries=1))
        retry_state = MagicMock(attempt_number=2)

        outcome = run.on_unexpected_exit(retry_state)
        error = OutcomeAssertions.assert_failure(outcome, UnexpectedRetryExit)
        assert error.attempts == 2
        assert run.finalize(outcome) is outcome
