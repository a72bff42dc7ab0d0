"""
Outcome — the two-slot value every neat_catch operation returns instead of raising.

An Outcome is a 2-tuple, so the usual way to consume it is to unpack it:

    data, error = neat_catch(lambda: json.loads(raw))
    if error is not None:
        ...

The concrete variant records which slot is meaningful:

    Success(value)  →  (value, None)
    Failure(error)  →  (None, error)

Success/failure is decided by the variant, never by the slot contents, so an
operation that legitimately returns None is still a Success:

    >>> outcome = Success(None)
    >>> outcome.is_success()
    True
    >>> tuple(outcome)
    (None, None)

Structural pattern matching works on the variants:

    match neat_catch(load):
        case Success(config):
            ...
        case Failure(error):
            ...
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")
R = TypeVar("R")


class Outcome(tuple, Generic[T, E]):
    """
    Base of the two Outcome variants. Never instantiated directly.

    Unpacks as `(data, error)`; use is_success()/is_failure() or match/case
    when the slot values alone are ambiguous (e.g. a successful None).
    """

    __slots__ = ()

    # ──────────────────────── Slots ────────────────────────

    @property
    def data(self) -> T | None:
        """The data slot: the value on success, None on failure."""
        return self[0]

    @property
    def err(self) -> E | None:
        """The error slot: the failure on failure, None on success."""
        return self[1]

    # ──────────────────────── Introspection ────────────────────────

    def is_success(self) -> bool:
        return isinstance(self, Success)

    def is_failure(self) -> bool:
        return isinstance(self, Failure)

    def value(self) -> T:
        """
        Extract the success value. Raises ValueError if called on a Failure.

        Prefer unpacking or match/case for safe access.
        """
        match self:
            case Success(v):
                return v
            case Failure(err):
                raise ValueError(f"Cannot get value from a Failure: {err!r}")
        raise TypeError("unreachable")  # pragma: no cover

    def error(self) -> E:
        """Extract the failure. Raises ValueError if called on a Success."""
        match self:
            case Failure(err):
                return err
            case Success(v):
                raise ValueError(f"Cannot get error from a Success: {v!r}")
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Transformations ────────────────────────

    def either(self, on_success: Callable[[T], R], on_failure: Callable[[E], R]) -> R:
        """
        Apply one of two functions depending on the variant.

            message = outcome.either(
                on_success=lambda user: f"Hello {user.name}",
                on_failure=lambda err: f"Error: {err}",
            )
        """
        match self:
            case Success(v):
                return on_success(v)
            case Failure(err):
                return on_failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def map(self, mapper: Callable[[T], U]) -> Outcome[U, E]:
        """Transform the success value. Failures pass through unchanged."""
        match self:
            case Success(v):
                return Success(mapper(v))
        return self  # type: ignore[return-value]

    def map_failure(self, mapper: Callable[[E], F]) -> Outcome[T, F]:
        """Transform the failure. Successes pass through unchanged."""
        match self:
            case Failure(err):
                return Failure(mapper(err))
        return self  # type: ignore[return-value]

    def get_or_else(self, default: T) -> T:
        """Extract the value or return a default on failure."""
        match self:
            case Success(v):
                return v
            case _:
                return default

    # ──────────────────────── Dunder methods ────────────────────────

    def __bool__(self) -> bool:
        """`if outcome:` holds only for a Success."""
        return self.is_success()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Outcome):
            return type(self) is type(other) and tuple.__eq__(self, other)
        if isinstance(other, tuple):
            return tuple.__eq__(self, other)
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        # Must agree with tuple equality: Success(1) == (1, None).
        return tuple.__hash__(self)


class Success(Outcome[T, Any]):
    """The success variant — `(value, None)`. The value may itself be None."""

    __slots__ = ()
    __match_args__ = ("data",)

    def __new__(cls, value: T) -> Success[T]:
        return tuple.__new__(cls, (value, None))

    def __getnewargs__(self) -> tuple[T]:
        return (self[0],)

    def __repr__(self) -> str:
        return f"Success({self[0]!r})"


class Failure(Outcome[Any, E]):
    """The failure variant — `(None, error)`."""

    __slots__ = ()
    __match_args__ = ("err",)

    def __new__(cls, error: E) -> Failure[E]:
        return tuple.__new__(cls, (None, error))

    def __getnewargs__(self) -> tuple[E]:
        return (self[1],)

    def __repr__(self) -> str:
        return f"Failure({self[1]!r})"


# Public alias for annotations: `def load() -> NeatCatchResult[Config, str]: ...`
NeatCatchResult = Outcome
