"""
Result pattern for per-item failure isolation.

Batch operations (such as comparing every study case of a user) wrap each
item in a ``Success`` or ``Failure`` so one bad item never aborts the batch.

Example:
    >>> result = capture(lambda: 10 / 2, ZeroDivisionError)
    >>> result.unwrap_or(0.0)
    5.0
    >>> capture(lambda: 10 / 0, ZeroDivisionError).is_failure()
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Never

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True, slots=True)
class Success[T]:
    """
    Successful outcome.

    Attributes:
        value: The computed value.
    """

    value: T

    def is_success(self) -> bool:
        """Return True if this is a Success."""
        return True

    def is_failure(self) -> bool:
        """Return False if this is a Success."""
        return False

    def unwrap(self) -> T:
        """Return the success value."""
        return self.value

    def unwrap_or(self, _default: T) -> T:
        """Return the success value, ignoring the default."""
        return self.value


@dataclass(frozen=True, slots=True)
class Failure[E]:
    """
    Failed outcome.

    Attributes:
        error: The captured error.
    """

    error: E

    def is_success(self) -> bool:
        """Return False if this is a Failure."""
        return False

    def is_failure(self) -> bool:
        """Return True if this is a Failure."""
        return True

    def unwrap(self) -> Never:
        """
        Raise since a Failure has no value.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"Cannot unwrap Failure: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        """Return the provided default."""
        return default


type Result[T, E] = Success[T] | Failure[E]


def capture[T](
    func: Callable[[], T],
    *errors: type[Exception],
) -> Result[T, Exception]:
    """
    Run ``func`` and wrap its outcome.

    Args:
        func: Zero-argument callable to run.
        *errors: Exception types converted into a Failure. Defaults to
            ``Exception`` when none are given.

    Returns:
        Success with the return value, or Failure with the raised error.
    """
    catch = errors or (Exception,)
    try:
        return Success(func())
    except catch as exc:
        return Failure(exc)
