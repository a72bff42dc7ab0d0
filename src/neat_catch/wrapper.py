"""
Wrapper factory — turn any callable into one that returns an Outcome.

    safe_parse = create_neat_wrapper(json.loads)
    data, error = safe_parse('{"valid": "json"}')

    @create_neat_wrapper
    async def fetch(url: str) -> bytes: ...

    data, error = await fetch("https://example.com")
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from neat_catch.catch import neat_catch
from neat_catch.outcome import Outcome

E = TypeVar("E")


def create_neat_wrapper(
    fn: Callable[..., Any],
    error_transformer: Callable[[Any], E] | None = None,
) -> Callable[..., Outcome[Any, E] | Awaitable[Outcome[Any, E]]]:
    """
    Wrap `fn` so every call returns an Outcome (or an awaitable of one).

    The wrapper takes the same arguments as `fn`, keeps no state between
    calls, and never raises: failures land in the error slot.
    """

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Outcome[Any, E] | Awaitable[Outcome[Any, E]]:
        return neat_catch(lambda: fn(*args, **kwargs), error_transformer)

    return wrapper
