"""
Survivor income after the client's death.

Recomputes the household's guaranteed income for plan years at or after a
hypothetical client death age, and summarizes the resulting shortfall against
a reduced survivor income goal.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .annuity_options import effective_annual_payout, survives_client_death, valid_options
from .household import HouseholdSnapshot
from .projection import ProjectionResult, ProjectionRow

DEFAULT_SURVIVOR_GOAL_PCT = 85.0


class SurvivorIncome(BaseModel):
    """Guaranteed income available to the surviving spouse in one plan year."""

    client_age: int = Field(..., description="Client age (plan-year counter)")
    spouse_age: int = Field(..., description="Spouse age")
    pension_annuity_rental: float = Field(
        ..., ge=0, description="Pension, annuity and rental after survivor reductions"
    )
    social_security: float = Field(
        ..., ge=0, description="Higher of the two single-life benefits"
    )
    conversion_income: float = Field(
        ..., ge=0, description="Conversion payouts that survive the client"
    )
    earned_income: float = Field(..., ge=0, description="Spouse earned income")

    @property
    def guaranteed(self) -> float:
        """Guaranteed income excluding earnings."""
        return self.pension_annuity_rental + self.social_security + self.conversion_income

    @property
    def total(self) -> float:
        """All survivor income."""
        return self.guaranteed + self.earned_income


class SurvivorShortfall(BaseModel):
    """Shortfall of survivor income against the survivor goal."""

    death_age: int = Field(..., description="Client death age modeled")
    first_shortfall_age: Optional[int] = Field(
        default=None, description="First client age with a shortfall"
    )
    first_year_shortfall: float = Field(
        default=0.0, ge=0, description="Shortfall in the first post-death year"
    )
    first_year_shortfall_pct: Optional[float] = Field(
        default=None, description="First-year shortfall as % of the goal (None if no goal)"
    )
    cumulative_shortfall: float = Field(
        default=0.0, ge=0, description="Nominal shortfall summed over all post-death years"
    )
    years_modeled: int = Field(default=0, ge=0, description="Post-death years")


def survivor_pension_annuity_rental(
    snapshot: HouseholdSnapshot,
    client_age: int,
    death_age: int,
    spouse_age: Optional[int] = None,
) -> float:
    """Pension, annuity and rental income with survivor reductions applied.

    Client-owned pensions and annuities are scaled by their survivor
    percentage once ``client_age >= death_age``. Spouse-owned sources and
    rentals are never reduced.

    Args:
        snapshot: Household inputs
        client_age: Client age for the plan year
        death_age: Client age at death
        spouse_age: Spouse age for the plan year (defaults to ``client_age``)

    Returns:
        Annual income for the plan year
    """
    guaranteed = snapshot.guaranteed_income
    after_death = client_age >= death_age
    effective_spouse_age = client_age if spouse_age is None else spouse_age

    total = 0.0
    for source in list(guaranteed.pensions) + list(guaranteed.annuities):
        owner_age = snapshot.owner_age(source.owner, client_age, effective_spouse_age)
        amount = source.annual_amount(owner_age)
        if source.owner == "client" and after_death:
            amount *= source.survivor_pct / 100
        total += amount

    for rental in guaranteed.rentals:
        owner_age = snapshot.owner_age(rental.owner, client_age, effective_spouse_age)
        total += rental.annual_amount(owner_age)

    return total


def surviving_conversion_income(
    snapshot: HouseholdSnapshot, client_age: int, spouse_age: int
) -> float:
    """Conversion payouts that continue after the client's death."""
    total = 0.0
    for option in valid_options(snapshot.align_options):
        if not survives_client_death(option):
            continue
        owner_age = snapshot.owner_age(option.owner, client_age, spouse_age)
        if owner_age >= option.income_start_age:
            total += effective_annual_payout(option)
    return total


class SurvivorIncomeResolver:
    """Resolves survivor income for projection rows after a client death age."""

    def __init__(self, snapshot: HouseholdSnapshot, death_age: int):
        """Initialize the resolver.

        Args:
            snapshot: Household inputs
            death_age: Client age at death
        """
        self.snapshot = snapshot
        self.death_age = death_age

    def income_for_row(
        self, row: ProjectionRow, include_conversion: bool = False
    ) -> SurvivorIncome:
        """Survivor income for a single projection row."""
        conversion = 0.0
        if include_conversion:
            conversion = surviving_conversion_income(
                self.snapshot, row.client_age, row.spouse_age
            )
        return SurvivorIncome(
            client_age=row.client_age,
            spouse_age=row.spouse_age,
            pension_annuity_rental=survivor_pension_annuity_rental(
                self.snapshot, row.client_age, self.death_age, row.spouse_age
            ),
            social_security=max(row.social_security.client, row.social_security.spouse),
            conversion_income=conversion,
            earned_income=row.earned_income.spouse,
        )

    def post_death_rows(self, projection: ProjectionResult) -> List[ProjectionRow]:
        """Rows at or after the death age; empty without a spouse."""
        if not self.snapshot.has_spouse:
            return []
        return [row for row in projection.rows if row.client_age >= self.death_age]

    def income_by_year(self, projection: ProjectionResult) -> List[SurvivorIncome]:
        """Survivor income for every post-death row of a projection."""
        return [
            self.income_for_row(row, include_conversion=projection.includes_conversion)
            for row in self.post_death_rows(projection)
        ]

    def shortfall(
        self,
        projection: ProjectionResult,
        goal_pct: float = DEFAULT_SURVIVOR_GOAL_PCT,
    ) -> SurvivorShortfall:
        """Summarize the survivor shortfall against ``goal_pct`` of the target.

        Args:
            projection: Projection for the path being evaluated
            goal_pct: Share of the household goal the survivor needs (%)

        Returns:
            SurvivorShortfall summary (all zero when there are no post-death years)
        """
        rows = self.post_death_rows(projection)
        result = SurvivorShortfall(death_age=self.death_age, years_modeled=len(rows))
        if not rows:
            return result

        first_shortfall_age = None
        cumulative = 0.0
        first_year_shortfall = 0.0
        first_year_pct = None

        for index, row in enumerate(rows):
            income = self.income_for_row(row, projection.includes_conversion)
            goal = row.target_goal_annual * goal_pct / 100
            shortfall = max(0.0, goal - income.total)
            if index == 0:
                first_year_shortfall = shortfall
                first_year_pct = shortfall / goal * 100 if goal > 0 else None
            if shortfall > 0 and first_shortfall_age is None:
                first_shortfall_age = row.client_age
            cumulative += shortfall

        return result.model_copy(
            update={
                "first_shortfall_age": first_shortfall_age,
                "first_year_shortfall": first_year_shortfall,
                "first_year_shortfall_pct": first_year_pct,
                "cumulative_shortfall": cumulative,
            }
        )
