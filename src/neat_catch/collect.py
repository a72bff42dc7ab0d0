"""
Parallel collector — run independent operations concurrently, keep every outcome.

Unlike asyncio.gather's default fail-fast behaviour, one failing operation
never aborts its siblings: every operation runs to completion and its value
or error is stored at the same index as the operation itself.

    batch = await neat_catch_all([
        lambda: fetch("a"),
        lambda: fetch("b"),
        lambda: fetch("c"),
    ])
    results, errors = batch
    # results → ["A", None, "C"], errors → [None, HTTPError(...), None]

A side with no populated slot at all is reported as None rather than as a
list of empty slots:

    all succeeded → errors is None
    all failed    → results is None
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Sequence, TypeVar

from neat_catch.catch import neat_catch_async
from neat_catch.outcome import Failure, Outcome, Success
from neat_catch.transform import transform_error

E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """
    Index-aligned results and errors of a batch.

    `results[i]` holds operation i's value when it succeeded, `errors[i]` its
    error when it failed; the other slot is None. `outcomes` keeps the exact
    per-index Outcome, so a successful None is still distinguishable from an
    unset slot.
    """

    results: list[Any] | None
    errors: list[Any] | None
    outcomes: tuple[Outcome[Any, Any], ...] = ()

    def succeeded(self) -> list[int]:
        """Indices of the operations that succeeded."""
        return [i for i, outcome in enumerate(self.outcomes) if outcome.is_success()]

    def failed(self) -> list[int]:
        """Indices of the operations that failed."""
        return [i for i, outcome in enumerate(self.outcomes) if outcome.is_failure()]

    def __iter__(self) -> Iterator[list[Any] | None]:
        """Allow `results, errors = batch`."""
        return iter((self.results, self.errors))

    @staticmethod
    def from_outcomes(outcomes: Sequence[Outcome[Any, Any]]) -> BatchOutcome:
        """Spread per-index outcomes into the two aligned sequences."""
        size = len(outcomes)
        results: list[Any] = [None] * size
        errors: list[Any] = [None] * size
        populated_results = 0
        populated_errors = 0

        for index, outcome in enumerate(outcomes):
            match outcome:
                case Success(data):
                    results[index] = data
                    populated_results += 1
                case Failure(err):
                    errors[index] = err
                    populated_errors += 1

        return BatchOutcome(
            results=results if populated_results else None,
            errors=errors if populated_errors else None,
            outcomes=tuple(outcomes),
        )


async def neat_catch_all(
    operations: Sequence[Callable[[], Awaitable[Any] | Any]],
    error_transformer: Callable[[Any], E] | None = None,
) -> BatchOutcome:
    """
    Run every operation concurrently and wait until all of them have settled.

    Each operation goes through neat_catch, so both raised exceptions and
    failed awaitables become per-index errors (transformed by
    `error_transformer` when given).

    A child that ends with `asyncio.CancelledError` is not a per-index error:
    the cancellation is re-raised once the batch has settled.
    """
    settled = await asyncio.gather(
        *(neat_catch_async(operation, error_transformer) for operation in operations),
        return_exceptions=True,
    )

    outcomes: list[Outcome[Any, Any]] = []
    for entry in settled:
        if isinstance(entry, Outcome):
            outcomes.append(entry)
        elif isinstance(entry, BaseException) and not isinstance(entry, Exception):
            # Cancellation and other control signals are not operation failures.
            raise entry
        else:
            outcomes.append(Failure(transform_error(entry, error_transformer)))
    return BatchOutcome.from_outcomes(outcomes)
