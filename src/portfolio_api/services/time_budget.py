"""Wall-clock budget for one request.

Hosted request handlers are killed at a hard execution ceiling. Long
storage scans check a ``TimeBudget`` at every page boundary and stop
early, returning a labelled partial result, once less than the safety
margin remains.
"""

import time
from collections.abc import Callable


class TimeBudget:
    """Deadline measured on a monotonic clock.

    Args:
        budget_ms: Total time allowed, measured from construction.
        margin_ms: Time to keep in reserve for reporting and the response.
        clock: Seconds-returning clock; injectable for tests.
    """

    def __init__(
        self,
        budget_ms: int,
        margin_ms: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        if budget_ms <= 0:
            raise ValueError("budget_ms must be positive")
        if margin_ms < 0:
            raise ValueError("margin_ms must not be negative")
        self.budget_ms = budget_ms
        self.margin_ms = margin_ms
        self._clock = clock
        self._started = clock()

    @property
    def elapsed_ms(self) -> float:
        return (self._clock() - self._started) * 1000

    @property
    def remaining_ms(self) -> float:
        return max(0.0, self.budget_ms - self.elapsed_ms)

    def exhausted(self) -> bool:
        """True once the remaining time has dropped inside the margin."""
        return self.remaining_ms <= self.margin_ms
