"""
Monte Carlo success-rate simulation.

This module bootstraps historical annual returns to estimate the probability
that a portfolio can fund the gap between the income goal and guaranteed
income every retirement year. Withdrawals are need-based (goal minus
guaranteed income) and intentionally differ from the projection's
distribution-rate withdrawals.
"""

import logging
from typing import Optional, Protocol, Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from .household import HouseholdSnapshot
from .projection import ProjectionResult
from .survivor_income import DEFAULT_SURVIVOR_GOAL_PCT, SurvivorIncomeResolver

logger = logging.getLogger(__name__)

DEFAULT_NUM_SIMULATIONS = 1000


class RandomSource(Protocol):
    """Uniform integer source used to pick historical returns."""

    def integers(self, low: int, high: int, size: int) -> NDArray[np.int64]:
        """Draw ``size`` integers uniformly from ``[low, high)``."""
        ...


class MonteCarloResult(BaseModel):
    """Success statistics for a Monte Carlo run."""

    success_rate_pct: float = Field(..., ge=0, le=100, description="Success rate (%)")
    num_success: int = Field(..., ge=0, description="Successful simulations")
    num_fail: int = Field(..., ge=0, description="Failed simulations")


class MonteCarloSimulator:
    """Bootstrap simulator over a pool of historical annual returns."""

    def __init__(
        self,
        historical_returns_pct: Sequence[float],
        num_simulations: int = DEFAULT_NUM_SIMULATIONS,
        rng: Optional[RandomSource] = None,
    ):
        """Initialize the simulator.

        Args:
            historical_returns_pct: Annual returns to resample, in percent
            num_simulations: Number of independent simulations
            rng: Random source; an unseeded numpy Generator when omitted

        Raises:
            ValueError: If num_simulations is negative
        """
        if num_simulations < 0:
            raise ValueError("Number of simulations must be non-negative")
        self.returns_pct = np.asarray(historical_returns_pct, dtype=np.float64)
        self.num_simulations = num_simulations
        self.rng = rng if rng is not None else np.random.default_rng()

    def simulate(
        self, starting_balance: float, withdrawals: Sequence[float]
    ) -> MonteCarloResult:
        """
        Simulate need-based withdrawals from a starting balance.

        Each year a path fails if its balance is below the withdrawal, and
        otherwise becomes ``(balance - withdrawal) * (1 + r / 100)`` for a
        return ``r`` drawn with replacement from the pool. A path that then
        drops below zero also fails.

        Args:
            starting_balance: Portfolio balance at the first simulated year
            withdrawals: Required withdrawal for each simulated year

        Returns:
            MonteCarloResult with success counts
        """
        num_sims = self.num_simulations
        pool_size = len(self.returns_pct)
        if pool_size == 0 or num_sims == 0:
            return MonteCarloResult(success_rate_pct=0.0, num_success=0, num_fail=num_sims)

        balances = np.full(num_sims, float(starting_balance))
        alive = np.ones(num_sims, dtype=bool)

        for needed in withdrawals:
            alive &= balances >= needed
            draws = self.rng.integers(0, pool_size, size=num_sims)
            growth = 1 + self.returns_pct[draws] / 100
            balances = np.where(alive, (balances - needed) * growth, balances)
            alive &= balances >= 0

        num_success = int(np.count_nonzero(alive))
        return MonteCarloResult(
            success_rate_pct=num_success / num_sims * 100,
            num_success=num_success,
            num_fail=num_sims - num_success,
        )

    def run(self, projection: ProjectionResult) -> Optional[MonteCarloResult]:
        """
        Estimate the success rate of a projection's retirement years.

        Starts from the total future value at retirement and withdraws
        ``max(0, target - guaranteed)`` each retirement year.

        Args:
            projection: Completed projection for one path

        Returns:
            MonteCarloResult, or None when there are no retirement years
        """
        rows = projection.retirement_rows()
        if not rows:
            return None

        withdrawals = [
            max(0.0, row.target_goal_annual - row.guaranteed_dollars) for row in rows
        ]
        result = self.simulate(projection.total_future_value, withdrawals)
        logger.debug(
            "Monte Carlo over %d years: %.1f%% success",
            len(rows),
            result.success_rate_pct,
        )
        return result

    def run_survivor(
        self,
        projection: ProjectionResult,
        snapshot: HouseholdSnapshot,
        death_age: int,
        goal_pct: float = DEFAULT_SURVIVOR_GOAL_PCT,
    ) -> Optional[MonteCarloResult]:
        """
        Estimate the surviving spouse's success rate after the client's death.

        Simulates plan years at or after ``death_age``, starting from the
        projection's portfolio total at the start of the death year. The goal
        is reduced to ``goal_pct`` of the target and the offset is survivor
        guaranteed income plus the spouse's own earnings.

        Args:
            projection: Completed projection for one path
            snapshot: Household inputs the projection was built from
            death_age: Client age at death
            goal_pct: Share of the household goal the survivor needs (%)

        Returns:
            MonteCarloResult, or None when there is nothing to simulate
        """
        resolver = SurvivorIncomeResolver(snapshot, death_age)
        rows = resolver.post_death_rows(projection)
        if not rows:
            return None

        withdrawals = []
        for row in rows:
            income = resolver.income_for_row(row, projection.includes_conversion)
            goal = row.target_goal_annual * goal_pct / 100
            withdrawals.append(max(0.0, goal - income.total))

        return self.simulate(rows[0].portfolio_total_at_start_of_year, withdrawals)


def run_monte_carlo(
    projection: ProjectionResult,
    historical_returns_pct: Sequence[float],
    num_simulations: int = DEFAULT_NUM_SIMULATIONS,
    rng: Optional[RandomSource] = None,
) -> Optional[MonteCarloResult]:
    """Run the retirement Monte Carlo for a projection."""
    simulator = MonteCarloSimulator(historical_returns_pct, num_simulations, rng)
    return simulator.run(projection)


def run_survivor_monte_carlo(
    projection: ProjectionResult,
    snapshot: HouseholdSnapshot,
    death_age: int,
    historical_returns_pct: Sequence[float],
    num_simulations: int = DEFAULT_NUM_SIMULATIONS,
    rng: Optional[RandomSource] = None,
    goal_pct: float = DEFAULT_SURVIVOR_GOAL_PCT,
) -> Optional[MonteCarloResult]:
    """Run the survivor Monte Carlo for a projection."""
    simulator = MonteCarloSimulator(historical_returns_pct, num_simulations, rng)
    return simulator.run_survivor(projection, snapshot, death_age, goal_pct)
