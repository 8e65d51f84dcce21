"""Bounded retry policy driven by tagged per-attempt outcomes.

An operation passed to :func:`execute` is a zero-argument callable that
returns exactly one of:

- :class:`Ok`: the attempt succeeded; its ``value`` is returned.
- :class:`Retriable`: try again, optionally after a specific
  ``suggested_delay`` which always wins over the strategy's delay.
- :class:`Terminal`: give up now; the wrapped error is raised unchanged.

Exceptions raised by the operation itself are not caught: an operation
signals failure through its return value, so anything it raises is a bug
or an interrupt and propagates as-is.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from wayback_resolver.core.exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Retriable:
    error: BaseException
    suggested_delay: float | None = None


@dataclass(frozen=True)
class Terminal:
    error: BaseException


Outcome = Union[Ok[T], Retriable, Terminal]


class DelayStrategy(str, enum.Enum):
    """How the default delay grows between attempts."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"

    def delay_for(self, attempt: int, base_delay: float) -> float:
        """Return the delay after the zero-based *attempt*."""
        if self is DelayStrategy.EXPONENTIAL:
            return base_delay * (2**attempt)
        return base_delay


def execute(
    operation: Callable[[], Outcome[T]],
    *,
    max_attempts: int,
    base_delay: float,
    strategy: DelayStrategy = DelayStrategy.FIXED,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run *operation* until it succeeds, fails terminally, or attempts run out.

    Args:
        operation: Zero-argument callable returning an :data:`Outcome`.
        max_attempts: Total number of tries, including the first.
        base_delay: Seconds fed to *strategy* when no delay is suggested.
        strategy: :class:`DelayStrategy` used for the default delay.
        sleep: Blocking sleep function; injectable for tests.

    Returns:
        The value carried by the first :class:`Ok` outcome.

    Raises:
        ValueError: If *max_attempts* is below 1.
        RetryExhaustedError: If every attempt returned :class:`Retriable`.
        BaseException: The error carried by a :class:`Terminal` outcome.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    attempt = 0
    while True:
        outcome = operation()

        if isinstance(outcome, Ok):
            return outcome.value
        if isinstance(outcome, Terminal):
            raise outcome.error
        if not isinstance(outcome, Retriable):
            raise TypeError(f"operation returned {outcome!r}, expected Ok, Retriable or Terminal")

        if attempt + 1 >= max_attempts:
            raise RetryExhaustedError(max_attempts, outcome.error) from outcome.error

        delay = (
            outcome.suggested_delay
            if outcome.suggested_delay is not None
            else strategy.delay_for(attempt, base_delay)
        )
        logger.warning(
            "retry: attempt %d/%d failed (%s); retrying in %.1fs",
            attempt + 1,
            max_attempts,
            outcome.error,
            delay,
        )
        sleep(delay)
        attempt += 1
