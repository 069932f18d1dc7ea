"""Household projection and simulation models."""

from .household import (
    AccountBucket,
    AlignOption,
    ClientInfo,
    GuaranteedIncomeInputs,
    HouseholdSnapshot,
    IncomeInputs,
    PensionOrAnnuityIncome,
    RentalIncome,
    SideIncomeEntry,
    SocialSecurity,
    SpouseInfo,
    WorkIncome,
)
from .rate_aggregator import (
    AccountPool,
    aggregate_by_category,
    aggregate_by_category_and_owner,
)
from .annuity_options import effective_annual_payout, is_option_valid, valid_options
from .projection import (
    OwnerSplit,
    ProjectionComparison,
    ProjectionEngine,
    ProjectionResult,
    ProjectionRow,
    project,
    run_projection,
)
from .survivor_income import (
    SurvivorIncome,
    SurvivorIncomeResolver,
    SurvivorShortfall,
    survivor_pension_annuity_rental,
)
from .monte_carlo import (
    MonteCarloResult,
    MonteCarloSimulator,
    run_monte_carlo,
    run_survivor_monte_carlo,
)

__all__ = [
    "AccountBucket",
    "AlignOption",
    "ClientInfo",
    "GuaranteedIncomeInputs",
    "HouseholdSnapshot",
    "IncomeInputs",
    "PensionOrAnnuityIncome",
    "RentalIncome",
    "SideIncomeEntry",
    "SocialSecurity",
    "SpouseInfo",
    "WorkIncome",
    "AccountPool",
    "aggregate_by_category",
    "aggregate_by_category_and_owner",
    "effective_annual_payout",
    "is_option_valid",
    "valid_options",
    "OwnerSplit",
    "ProjectionComparison",
    "ProjectionEngine",
    "ProjectionResult",
    "ProjectionRow",
    "project",
    "run_projection",
    "SurvivorIncome",
    "SurvivorIncomeResolver",
    "SurvivorShortfall",
    "survivor_pension_annuity_rental",
    "MonteCarloResult",
    "MonteCarloSimulator",
    "run_monte_carlo",
    "run_survivor_monte_carlo",
]
