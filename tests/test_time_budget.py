"""Tests for the request time budget."""

import pytest

from conftest import FakeClock
from portfolio_api.services.time_budget import TimeBudget


class TestTimeBudget:
    def test_fresh_budget_is_not_exhausted(self):
        clock = FakeClock()
        budget = TimeBudget(1000, margin_ms=100, clock=clock)

        assert budget.elapsed_ms == 0
        assert budget.remaining_ms == 1000
        assert not budget.exhausted()

    def test_exhausted_inside_margin(self):
        """The budget reports exhausted once less than the margin is left."""
        clock = FakeClock()
        budget = TimeBudget(1000, margin_ms=100, clock=clock)

        clock.advance(899)
        assert not budget.exhausted()

        clock.advance(1)
        assert budget.exhausted()

    def test_remaining_never_negative(self):
        clock = FakeClock()
        budget = TimeBudget(1000, margin_ms=0, clock=clock)

        clock.advance(5000)

        assert budget.remaining_ms == 0
        assert budget.exhausted()

    def test_zero_margin_allows_whole_budget(self):
        clock = FakeClock()
        budget = TimeBudget(1000, margin_ms=0, clock=clock)

        clock.advance(999)

        assert not budget.exhausted()

    @pytest.mark.parametrize("budget_ms", [0, -1])
    def test_rejects_non_positive_budget(self, budget_ms):
        with pytest.raises(ValueError):
            TimeBudget(budget_ms)

    def test_rejects_negative_margin(self):
        with pytest.raises(ValueError):
            TimeBudget(1000, margin_ms=-1)
