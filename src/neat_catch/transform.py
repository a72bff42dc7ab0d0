"""
ErrorTransformer contract — turning a caught failure into the caller's error type.

An error transformer is any callable taking the raw failure (and, in the retry
path, the 1-based attempt number) and returning the value that will sit in the
Outcome's error slot:

    def to_message(error: object) -> str: ...
    def with_attempt(error: object, attempt: int) -> str: ...

Transformers are not assumed to be total. If one raises, the failure is not
propagated: the caller receives a TransformError holding both the original
failure and the transformer's exception.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from neat_catch.errors import TransformError

E = TypeVar("E")
E_co = TypeVar("E_co", covariant=True)
logger = logging.getLogger("neat_catch.transform")


@runtime_checkable
class ErrorTransformer(Protocol[E_co]):
    """Converts a caught failure into a typed error value."""

    def __call__(self, error: Any) -> E_co: ...


@runtime_checkable
class RetryErrorTransformer(Protocol[E_co]):
    """Converts the final failure of a retry run, given the attempt that produced it."""

    def __call__(self, error: Any, attempt: int) -> E_co: ...


def transform_error(
    error: Any,
    transformer: Callable[..., E] | None = None,
    *args: Any,
) -> E | TransformError:
    """
    Apply the error transformer contract to a caught failure.

    No transformer: the failure is returned unchanged (no shape validation).
    Transformer raising: a TransformError(primary=error, secondary=exc) is
    returned in its place.

        >>> transform_error("boom")
        'boom'
        >>> transform_error("boom", str.upper)
        'BOOM'
    """
    if transformer is None:
        return error
    try:
        return transformer(error, *args)
    except Exception as transform_exc:
        logger.warning(
            "Error transformer %r failed on %r: %s",
            getattr(transformer, "__name__", transformer),
            error,
            transform_exc,
        )
        return TransformError(error, transform_exc)
