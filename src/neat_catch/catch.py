"""
Result converter — run an operation and capture its outcome as data.

    data, error = neat_catch(lambda: int(raw))                # sync → Outcome
    data, error = await neat_catch(lambda: client.get(url))   # async → awaitable Outcome

Dispatch happens on what the operation returns, not on how it was declared:
a plain function returning a coroutine or a future is treated as async, and a
plain value is returned without ever suspending.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, TypeVar

from neat_catch.outcome import Failure, Outcome, Success
from neat_catch.transform import transform_error

T = TypeVar("T")
E = TypeVar("E")


def is_awaitable(value: Any) -> bool:
    """
    Capability check for awaitables: anything exposing `__await__`.

    Covers coroutines, asyncio futures and tasks, and future-like objects from
    other libraries, without an isinstance check against a concrete type.
    """
    return inspect.isawaitable(value)


async def _settle(
    awaitable: Awaitable[T],
    error_transformer: Callable[[Any], E] | None,
) -> Outcome[T, E]:
    try:
        data = await awaitable
    except Exception as e:
        return Failure(transform_error(e, error_transformer))
    return Success(data)


def neat_catch(
    operation: Callable[[], T | Awaitable[T]],
    error_transformer: Callable[[Any], E] | None = None,
) -> Outcome[T, E] | Awaitable[Outcome[T, E]]:
    """
    Execute a zero-argument operation and return its outcome instead of raising.

    Returns Success(value) / Failure(error) synchronously when the operation
    returns a plain value, or an awaitable resolving to one when it returns an
    awaitable. Exceptions raised synchronously or by the awaitable are passed
    through `error_transformer` (identity when omitted); the raised object is
    never coerced.

        >>> neat_catch(lambda: 42)
        Success(42)
        >>> neat_catch(lambda: int("x"), lambda e: type(e).__name__)
        Failure('ValueError')
    """
    try:
        result = operation()
    except Exception as e:
        return Failure(transform_error(e, error_transformer))

    if is_awaitable(result):
        return _settle(result, error_transformer)
    return Success(result)


async def neat_catch_async(
    operation: Callable[[], T | Awaitable[T]],
    error_transformer: Callable[[Any], E] | None = None,
) -> Outcome[T, E]:
    """
    Always-awaitable form of neat_catch, for callers that drive sync and async
    operations from the same coroutine.
    """
    outcome = neat_catch(operation, error_transformer)
    if is_awaitable(outcome):
        return await outcome
    return outcome
