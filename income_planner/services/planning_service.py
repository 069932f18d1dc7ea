"""
Planning service for coordinating projection and simulation runs.

This service sits between the HTTP layer and the pure engines: it validates
request payloads into snapshots, picks the path to evaluate, supplies the
default returns pool and simulation count, and logs each run.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from income_planner.config import (
    Settings,
    check_simulation_count,
    get_global_settings,
)
from income_planner.models.historical_returns import get_returns_pool
from income_planner.models.household import HouseholdSnapshot
from income_planner.models.income_summary import (
    TaxRates,
    compare_paths,
    post_tax_by_year,
    shortage_surplus_by_year,
    summarize_retirement,
)
from income_planner.models.monte_carlo import MonteCarloSimulator, RandomSource
from income_planner.models.projection import ProjectionResult, project, run_projection
from income_planner.models.survivor_income import SurvivorIncomeResolver

logger = logging.getLogger(__name__)

PATHS = ("current", "conversion")


class PlanningService:
    """Service for running household projections and simulations."""

    def __init__(
        self, settings: Optional[Settings] = None, rng: Optional[RandomSource] = None
    ) -> None:
        """Initialize the planning service.

        Args:
            settings: Application settings (global settings when omitted)
            rng: Random source passed to the Monte Carlo simulator
        """
        self.settings = settings or get_global_settings()
        self.rng = rng
        self.logger = logging.getLogger(__name__)

    def run_projection(self, snapshot_data: Dict[str, Any]) -> Dict[str, Any]:
        """Project both paths and summarize them.

        Args:
            snapshot_data: Household snapshot as a dictionary

        Returns:
            Dictionary with both projections, their post-tax views,
            shortage or surplus by year, summaries and milestones
        """
        snapshot = HouseholdSnapshot.model_validate(snapshot_data)
        comparison = project(snapshot)
        paths = {"current": comparison.current, "conversion": comparison.conversion}
        self.logger.info(
            f"Projected {len(comparison.current.rows)} years "
            f"(conversion path: {comparison.has_conversion_path})"
        )
        return {
            "current": comparison.current.model_dump(),
            "conversion": comparison.conversion.model_dump(),
            "has_conversion_path": comparison.has_conversion_path,
            "summaries": {
                "current": summarize_retirement(comparison.current, snapshot).model_dump(),
                "conversion": summarize_retirement(
                    comparison.conversion, snapshot
                ).model_dump(),
            },
            "tax_rates": TaxRates.from_snapshot(snapshot).model_dump(),
            "post_tax": {
                path: [r.model_dump() for r in post_tax_by_year(result, snapshot)]
                for path, result in paths.items()
            },
            "shortage_surplus": {
                path: {
                    "pre_tax": [
                        s.model_dump() for s in shortage_surplus_by_year(result, snapshot)
                    ],
                    "post_tax": [
                        s.model_dump()
                        for s in shortage_surplus_by_year(result, snapshot, post_tax=True)
                    ],
                }
                for path, result in paths.items()
            },
            "milestones": [m.model_dump() for m in compare_paths(comparison)],
        }

    def run_monte_carlo(
        self,
        snapshot_data: Dict[str, Any],
        path: str = "current",
        historical_returns_pct: Optional[Sequence[float]] = None,
        num_simulations: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """Estimate the success rate for one path.

        Returns:
            Success statistics, or None when there are no retirement years

        Raises:
            ValueError: If the path or simulation count is invalid
        """
        snapshot = HouseholdSnapshot.model_validate(snapshot_data)
        projection = self._projection_for_path(snapshot, path)
        simulator = self._simulator(historical_returns_pct, num_simulations)

        result = simulator.run(projection)
        if result is None:
            self.logger.info(f"Monte Carlo skipped for {path} path: no retirement years")
            return None

        self.logger.info(
            f"Monte Carlo for {path} path: {result.success_rate_pct:.1f}% success "
            f"over {simulator.num_simulations} simulations"
        )
        return result.model_dump()

    def run_survivor_analysis(
        self,
        snapshot_data: Dict[str, Any],
        death_age: int,
        path: str = "current",
        historical_returns_pct: Optional[Sequence[float]] = None,
        num_simulations: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Survivor shortfall summary and survivor Monte Carlo for one path.

        Raises:
            ValueError: If the path or simulation count is invalid
        """
        snapshot = HouseholdSnapshot.model_validate(snapshot_data)
        projection = self._projection_for_path(snapshot, path)
        goal_pct = self.settings.survivor_goal_pct

        shortfall = SurvivorIncomeResolver(snapshot, death_age).shortfall(
            projection, goal_pct=goal_pct
        )
        simulator = self._simulator(historical_returns_pct, num_simulations)
        result = simulator.run_survivor(projection, snapshot, death_age, goal_pct=goal_pct)

        self.logger.info(
            f"Survivor analysis for {path} path at death age {death_age}: "
            f"cumulative shortfall {shortfall.cumulative_shortfall:,.0f}"
        )
        return {
            "shortfall": shortfall.model_dump(),
            "monte_carlo": result.model_dump() if result is not None else None,
        }

    def _projection_for_path(
        self, snapshot: HouseholdSnapshot, path: str
    ) -> ProjectionResult:
        if path not in PATHS:
            raise ValueError(f"path must be one of {PATHS}")
        return run_projection(snapshot, with_conversion=path == "conversion")

    def _simulator(
        self,
        historical_returns_pct: Optional[Sequence[float]],
        num_simulations: Optional[int],
    ) -> MonteCarloSimulator:
        returns: List[float] = (
            list(historical_returns_pct)
            if historical_returns_pct is not None
            else get_returns_pool()
        )
        count = (
            num_simulations
            if num_simulations is not None
            else self.settings.monte_carlo_simulations
        )
        check_simulation_count(count)
        return MonteCarloSimulator(returns, num_simulations=count, rng=self.rng)
