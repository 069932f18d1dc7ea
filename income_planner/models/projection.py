"""
Projection engine for household retirement income.

This module implements the year-by-year cash-flow simulation for a household
snapshot. It runs in one of two modes: the current path, and the annuity
conversion path where each valid conversion option's premium is taken out of
its referenced account pool and its payout is added to guaranteed income.

Timing assumptions:
- Accumulation: contributions are added at the start of the year and the
  pool then grows for the full year, ``balance = (balance + C) * (1 + g)``.
  Contributions stop once the pool owner reaches their own retirement age.
- Withdrawal: from the client's retirement age every pool pays out
  ``balance * distribution`` at the start of the year and the remainder grows,
  ``balance = max(0, (balance - withdrawal) * (1 + g))``.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from .annuity_options import effective_annual_payout, premium_deductions, valid_options
from .household import (
    ACCOUNT_CATEGORIES,
    OWNERS,
    AlignOption,
    HouseholdSnapshot,
    compound,
)
from .rate_aggregator import AccountPool, aggregate_by_category_and_owner

logger = logging.getLogger(__name__)


class OwnerSplit(BaseModel):
    """An amount attributed to the client and the spouse."""

    client: float = Field(default=0.0, description="Client share")
    spouse: float = Field(default=0.0, description="Spouse share")

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> float:
        return self.client + self.spouse


class ProjectionRow(BaseModel):
    """One plan year of the projection."""

    year_index: int = Field(..., ge=0, description="Years since the start of the plan")
    client_age: int = Field(..., description="Client age this year")
    spouse_age: int = Field(..., description="Spouse age this year (0 if none)")

    earned_income: OwnerSplit = Field(..., description="Employment and side income")
    social_security: OwnerSplit = Field(..., description="Social Security benefits")
    pension: float = Field(default=0.0, description="Pension income")
    annuity: float = Field(default=0.0, description="Existing annuity income")
    rental: float = Field(default=0.0, description="Rental income")
    pension_annuity_rental: OwnerSplit = Field(
        ..., description="Pension, annuity and rental income by owner"
    )
    conversion_income: float = Field(
        default=0.0, description="Payouts from annuity conversion options"
    )

    account_draws: Dict[str, OwnerSplit] = Field(
        ..., description="Withdrawals by account category"
    )
    total_draws: float = Field(..., ge=0, description="Withdrawals across all categories")
    balances_at_start: Dict[str, OwnerSplit] = Field(
        ..., description="Pool balances at the start of the year"
    )
    portfolio_total_at_start_of_year: float = Field(
        ..., ge=0, description="Total of all pools at the start of the year"
    )

    annual_total: float = Field(..., description="Total annual income")
    monthly_total: float = Field(..., description="Total monthly income")
    target_goal_annual: float = Field(
        ..., description="Inflation-adjusted annual income goal"
    )
    guaranteed_dollars: float = Field(..., description="Guaranteed annual income")
    guaranteed_pct: float = Field(
        ..., ge=0, description="Guaranteed income as a share of the total (%)"
    )


class ProjectionResult(BaseModel):
    """Complete projection for one path."""

    rows: List[ProjectionRow] = Field(default_factory=list)
    future_values: Dict[str, float] = Field(
        ..., description="Account values at retirement by category"
    )
    future_values_by_owner: Dict[str, OwnerSplit] = Field(
        ..., description="Account values at retirement by category and owner"
    )
    retirement_age: int = Field(..., description="Client age when withdrawals start")
    includes_conversion: bool = Field(
        default=False, description="Whether conversion options were applied"
    )
    premiums_deducted: Dict[str, float] = Field(
        default_factory=dict,
        description="Premiums actually taken from each category, capped at its balance",
    )

    @property
    def total_future_value(self) -> float:
        """Combined account value at retirement."""
        return sum(self.future_values.values())

    def retirement_rows(self) -> List[ProjectionRow]:
        """Rows in the withdrawal phase."""
        return [row for row in self.rows if row.client_age >= self.retirement_age]

    def row_at_age(self, client_age: int) -> Optional[ProjectionRow]:
        """Row for a given client age, if it is inside the plan."""
        for row in self.rows:
            if row.client_age == client_age:
                return row
        return None


class ProjectionComparison(BaseModel):
    """Current path and annuity conversion path for the same snapshot."""

    current: ProjectionResult
    conversion: ProjectionResult
    has_conversion_path: bool = Field(
        ..., description="Whether at least one conversion option is valid"
    )


class ProjectionEngine:
    """Year-by-year projection of income and account balances."""

    def __init__(self, snapshot: HouseholdSnapshot, with_conversion: bool = False):
        """Initialize the engine.

        Args:
            snapshot: Household inputs
            with_conversion: Apply annuity conversion options
        """
        self.snapshot = snapshot
        self.with_conversion = with_conversion
        self.pools = aggregate_by_category_and_owner(snapshot.accounts)
        self.options: List[AlignOption] = (
            valid_options(snapshot.align_options) if with_conversion else []
        )

    def run(self) -> ProjectionResult:
        """Run the projection and return a new result."""
        client = self.snapshot.client
        start_age = client.current_age
        retirement_age = client.retirement_age
        num_years = max(0, client.plan_age - start_age + 1)

        balances = self._initial_balances()
        balances_at_plan_start = _copy_balances(balances)
        future_values: Optional[Dict[str, Dict[str, float]]] = None
        rows: List[ProjectionRow] = []

        for year_index in range(num_years):
            client_age = start_age + year_index
            spouse_age = self.snapshot.spouse_age_at(year_index)

            if client_age >= retirement_age and future_values is None:
                future_values = _copy_balances(balances)

            balances_at_start = _copy_balances(balances)
            if client_age >= retirement_age:
                draws = self._withdraw(balances)
            else:
                draws = _zero_balances()
                self._accumulate(balances, client_age, spouse_age)

            rows.append(
                self._build_row(
                    year_index, client_age, spouse_age, draws, balances_at_start
                )
            )

        if future_values is None:
            # Retirement falls beyond the plan horizon
            for age in range(start_age + num_years, retirement_age):
                year_index = age - start_age
                self._accumulate(
                    balances, age, self.snapshot.spouse_age_at(year_index)
                )
            future_values = balances

        logger.debug(
            "Projected %d years (conversion=%s, options=%d)",
            len(rows),
            self.with_conversion,
            len(self.options),
        )

        return ProjectionResult(
            rows=rows,
            future_values={
                category: sum(by_owner.values())
                for category, by_owner in future_values.items()
            },
            future_values_by_owner={
                category: OwnerSplit(**by_owner)
                for category, by_owner in future_values.items()
            },
            retirement_age=retirement_age,
            includes_conversion=self.with_conversion,
            premiums_deducted=self._premiums_deducted(balances_at_plan_start),
        )

    def _initial_balances(self) -> Dict[str, Dict[str, float]]:
        """Current pool balances less any conversion premiums, floored at 0."""
        deductions = premium_deductions(self.options)
        return {
            category: {
                owner: max(
                    0.0,
                    self.pools[category][owner].balance
                    - deductions.get((category, owner), 0.0),
                )
                for owner in OWNERS
            }
            for category in ACCOUNT_CATEGORIES
        }

    def _premiums_deducted(
        self, initial_balances: Dict[str, Dict[str, float]]
    ) -> Dict[str, float]:
        """Amount removed from each category by the premium deductions."""
        return {
            category: sum(
                self.pools[category][owner].balance - initial_balances[category][owner]
                for owner in OWNERS
            )
            for category in ACCOUNT_CATEGORIES
        }

    def _owner_is_working(self, owner: str, client_age: int, spouse_age: int) -> bool:
        """Whether contributions still flow into the owner's pools."""
        if owner == "spouse" and self.snapshot.has_spouse:
            return spouse_age < self.snapshot.spouse.retirement_age
        return client_age < self.snapshot.client.retirement_age

    def _accumulate(
        self, balances: Dict[str, Dict[str, float]], client_age: int, spouse_age: int
    ) -> None:
        """Apply one accumulation year to every pool in place."""
        for category in ACCOUNT_CATEGORIES:
            for owner in OWNERS:
                pool: AccountPool = self.pools[category][owner]
                contribution = (
                    pool.annual_contribution
                    if self._owner_is_working(owner, client_age, spouse_age)
                    else 0.0
                )
                growth = 1 + pool.growth_rate_pct / 100
                balances[category][owner] = max(
                    0.0, (balances[category][owner] + contribution) * growth
                )

    def _withdraw(self, balances: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, float]]:
        """Apply one withdrawal year to every pool in place and return the draws."""
        draws = _zero_balances()
        for category in ACCOUNT_CATEGORIES:
            for owner in OWNERS:
                pool = self.pools[category][owner]
                balance = balances[category][owner]
                withdrawal = balance * pool.distribution_rate_pct / 100
                growth = 1 + pool.growth_rate_pct / 100
                draws[category][owner] = withdrawal
                balances[category][owner] = max(0.0, (balance - withdrawal) * growth)
        return draws

    def _earned_income(self, year_index: int, client_age: int, spouse_age: int) -> OwnerSplit:
        income = self.snapshot.income

        client_amount = 0.0
        if client_age < income.client.stop_working_age:
            client_amount = compound(income.client.annual_amount, income.cola_pct, year_index)
        for entry in income.side_income:
            if entry.start_age <= client_age <= entry.end_age:
                client_amount += compound(
                    entry.amount, income.cola_pct, client_age - entry.start_age
                )

        spouse_amount = 0.0
        if self.snapshot.has_spouse and spouse_age < income.spouse.stop_working_age:
            spouse_amount = compound(income.spouse.annual_amount, income.cola_pct, year_index)

        return OwnerSplit(client=client_amount, spouse=spouse_amount)

    def _social_security(self, client_age: int, spouse_age: int) -> OwnerSplit:
        guaranteed = self.snapshot.guaranteed_income

        client_ss = guaranteed.social_security_client
        client_amount = 0.0
        if client_age >= client_ss.start_age:
            client_amount = compound(
                client_ss.monthly_benefit * 12,
                client_ss.cola_pct,
                client_age - client_ss.start_age,
            )

        spouse_ss = guaranteed.social_security_spouse
        spouse_amount = 0.0
        if self.snapshot.has_spouse and spouse_age >= spouse_ss.start_age:
            spouse_amount = compound(
                spouse_ss.monthly_benefit * 12,
                spouse_ss.cola_pct,
                spouse_age - spouse_ss.start_age,
            )

        return OwnerSplit(client=client_amount, spouse=spouse_amount)

    def _conversion_income(self, client_age: int, spouse_age: int) -> float:
        total = 0.0
        for option in self.options:
            if option.owner == "spouse" and not self.snapshot.has_spouse:
                continue
            owner_age = self.snapshot.owner_age(option.owner, client_age, spouse_age)
            if owner_age >= option.income_start_age:
                total += effective_annual_payout(option)
        return total

    def _build_row(
        self,
        year_index: int,
        client_age: int,
        spouse_age: int,
        draws: Dict[str, Dict[str, float]],
        balances_at_start: Dict[str, Dict[str, float]],
    ) -> ProjectionRow:
        snapshot = self.snapshot
        guaranteed = snapshot.guaranteed_income

        earned = self._earned_income(year_index, client_age, spouse_age)
        social_security = self._social_security(client_age, spouse_age)

        by_owner = {"client": 0.0, "spouse": 0.0}
        totals = {}
        for kind, sources in (
            ("pension", guaranteed.pensions),
            ("annuity", guaranteed.annuities),
            ("rental", guaranteed.rentals),
        ):
            kind_total = 0.0
            for source in sources:
                if source.owner == "spouse" and not snapshot.has_spouse:
                    continue
                amount = source.annual_amount(
                    snapshot.owner_age(source.owner, client_age, spouse_age)
                )
                kind_total += amount
                by_owner[source.owner] += amount
            totals[kind] = kind_total

        conversion_income = self._conversion_income(client_age, spouse_age)
        account_draws = {c: OwnerSplit(**draws[c]) for c in ACCOUNT_CATEGORIES}
        total_draws = sum(split.total for split in account_draws.values())

        guaranteed_dollars = (
            social_security.total
            + totals["pension"]
            + totals["annuity"]
            + totals["rental"]
            + conversion_income
        )
        annual_total = earned.total + guaranteed_dollars + total_draws
        guaranteed_pct = (
            guaranteed_dollars / annual_total * 100 if annual_total > 0 else 0.0
        )
        target_goal_annual = compound(
            snapshot.client.monthly_income_goal * 12,
            snapshot.client.goal_inflation_pct,
            year_index,
        )

        return ProjectionRow(
            year_index=year_index,
            client_age=client_age,
            spouse_age=spouse_age,
            earned_income=earned,
            social_security=social_security,
            pension=totals["pension"],
            annuity=totals["annuity"],
            rental=totals["rental"],
            pension_annuity_rental=OwnerSplit(**by_owner),
            conversion_income=conversion_income,
            account_draws=account_draws,
            total_draws=total_draws,
            balances_at_start={
                c: OwnerSplit(**balances_at_start[c]) for c in ACCOUNT_CATEGORIES
            },
            portfolio_total_at_start_of_year=sum(
                sum(by_owner_balance.values())
                for by_owner_balance in balances_at_start.values()
            ),
            annual_total=annual_total,
            monthly_total=annual_total / 12,
            target_goal_annual=target_goal_annual,
            guaranteed_dollars=guaranteed_dollars,
            guaranteed_pct=guaranteed_pct,
        )


def _zero_balances() -> Dict[str, Dict[str, float]]:
    return {category: {owner: 0.0 for owner in OWNERS} for category in ACCOUNT_CATEGORIES}


def _copy_balances(balances: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, float]]:
    return {category: dict(by_owner) for category, by_owner in balances.items()}


def run_projection(
    snapshot: HouseholdSnapshot, with_conversion: bool = False
) -> ProjectionResult:
    """Project one path for a household snapshot."""
    return ProjectionEngine(snapshot, with_conversion=with_conversion).run()


def project(snapshot: HouseholdSnapshot) -> ProjectionComparison:
    """Project both the current path and the annuity conversion path.

    Args:
        snapshot: Household inputs

    Returns:
        ProjectionComparison with freshly computed results for both paths
    """
    return ProjectionComparison(
        current=run_projection(snapshot, with_conversion=False),
        conversion=run_projection(snapshot, with_conversion=True),
        has_conversion_path=bool(valid_options(snapshot.align_options)),
    )
