"""
Income summaries derived from projection rows.

Post-tax views with flat tax rates, per-year shortage or surplus against the
income goal, the summary at retirement, and a current-versus-conversion
comparison at milestone ages.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .household import ACCOUNT_CATEGORIES, HouseholdSnapshot, compound
from .projection import ProjectionComparison, ProjectionResult, ProjectionRow

EXISTING_ANNUITY_GROWTH_PCT = 2.0
COMPARISON_AGES = (70, 80)


class TaxRates(BaseModel):
    """Flat tax rates (%) applied by income type."""

    earned_pct: float = Field(default=0.0, ge=0, le=100)
    social_security_pct: float = Field(default=0.0, ge=0, le=100)
    pension_other_pct: float = Field(default=0.0, ge=0, le=100)
    accounts_pct: float = Field(default=0.0, ge=0, le=100)

    @classmethod
    def from_snapshot(cls, snapshot: HouseholdSnapshot) -> "TaxRates":
        """Derive the display tax rates from household inputs.

        Social Security uses the mean of both benefits' rates; pension and
        other income use the first pension's rate, else the first annuity's,
        else the first rental's.
        """
        guaranteed = snapshot.guaranteed_income
        ss_pct = (
            guaranteed.social_security_client.tax_rate_pct
            + guaranteed.social_security_spouse.tax_rate_pct
        ) / 2

        pension_other_pct = 0.0
        for sources in (guaranteed.pensions, guaranteed.annuities, guaranteed.rentals):
            if sources:
                pension_other_pct = sources[0].tax_rate_pct
                break

        return cls(
            earned_pct=snapshot.income.tax_rate_pct,
            social_security_pct=ss_pct,
            pension_other_pct=pension_other_pct,
            accounts_pct=snapshot.accounts_tax_rate_pct,
        )


class PostTaxRow(BaseModel):
    """After-tax values for one projection row."""

    client_age: int
    earned_income: float
    social_security: float
    pension_other: float
    account_draws: Dict[str, float]
    annual_total: float
    monthly_total: float
    guaranteed_dollars: float
    guaranteed_pct: float

    @property
    def combined_draws(self) -> float:
        return sum(self.account_draws.values())


def _after_tax(value: float, rate_pct: float) -> float:
    return value * (1 - rate_pct / 100)


def apply_tax(row: ProjectionRow, rates: TaxRates) -> PostTaxRow:
    """Apply flat tax rates to a projection row."""
    earned = _after_tax(row.earned_income.total, rates.earned_pct)
    social_security = _after_tax(row.social_security.total, rates.social_security_pct)
    pension_other = _after_tax(
        row.pension + row.annuity + row.rental + row.conversion_income,
        rates.pension_other_pct,
    )
    draws = {
        category: _after_tax(split.total, rates.accounts_pct)
        for category, split in row.account_draws.items()
    }

    annual_total = earned + social_security + pension_other + sum(draws.values())
    guaranteed_dollars = social_security + pension_other
    guaranteed_pct = guaranteed_dollars / annual_total * 100 if annual_total > 0 else 0.0

    return PostTaxRow(
        client_age=row.client_age,
        earned_income=earned,
        social_security=social_security,
        pension_other=pension_other,
        account_draws=draws,
        annual_total=annual_total,
        monthly_total=annual_total / 12,
        guaranteed_dollars=guaranteed_dollars,
        guaranteed_pct=guaranteed_pct,
    )


def post_tax_by_year(
    projection: ProjectionResult, snapshot: HouseholdSnapshot
) -> List[PostTaxRow]:
    """After-tax view of every row, using the snapshot's flat rates."""
    rates = TaxRates.from_snapshot(snapshot)
    return [apply_tax(row, rates) for row in projection.rows]


class ShortageSurplus(BaseModel):
    """Income versus goal for one plan year."""

    client_age: int
    total_income: float
    target: float
    amount: float = Field(..., description="Surplus (positive) or shortage (negative)")
    pct: Optional[float] = Field(
        default=None, description="Amount as % of target; None when the target is 0"
    )


def shortage_surplus(
    row: ProjectionRow,
    post_tax_rates: Optional[TaxRates] = None,
    goal_tax_rate_pct: float = 0.0,
) -> ShortageSurplus:
    """Compare a row's income with its target goal.

    Args:
        row: Projection row
        post_tax_rates: When given, compare after-tax income
        goal_tax_rate_pct: Tax rate reducing the (pre-tax) goal in post-tax view

    Returns:
        ShortageSurplus for the row
    """
    if post_tax_rates is not None:
        total = apply_tax(row, post_tax_rates).annual_total
        target = _after_tax(row.target_goal_annual, goal_tax_rate_pct)
    else:
        total = row.annual_total
        target = row.target_goal_annual

    amount = total - target
    return ShortageSurplus(
        client_age=row.client_age,
        total_income=total,
        target=target,
        amount=amount,
        pct=amount / target * 100 if target > 0 else None,
    )


def shortage_surplus_by_year(
    projection: ProjectionResult,
    snapshot: HouseholdSnapshot,
    post_tax: bool = False,
) -> List[ShortageSurplus]:
    """Shortage or surplus for every row of a projection."""
    if not post_tax:
        return [shortage_surplus(row) for row in projection.rows]
    rates = TaxRates.from_snapshot(snapshot)
    return [
        shortage_surplus(row, rates, snapshot.client_tax_rate_pct)
        for row in projection.rows
    ]


class RetirementSummary(BaseModel):
    """Headline values at retirement for one path."""

    retirement_age: int
    first_year_income: float = Field(..., description="Annual income, first retirement year")
    first_year_monthly_income: float
    first_year_guaranteed_pct: Optional[float] = Field(
        default=None, description="None when the plan has no retirement year"
    )
    first_year_guaranteed_dollars: Optional[float] = None
    combined_future_value: float = Field(
        ..., description="Account values at retirement incl. annuity contract values"
    )
    existing_annuity_value: float = Field(
        ..., description="Existing annuity balances grown to retirement"
    )
    current_balances: Dict[str, float] = Field(
        ..., description="Today's balances by category"
    )
    plan_start_age: Optional[int] = None
    plan_end_age: Optional[int] = None


def existing_annuity_value_at_retirement(snapshot: HouseholdSnapshot, retirement_age: int) -> float:
    """Existing annuity contract values grown at 2% a year to retirement."""
    years = max(0, retirement_age - snapshot.client.current_age)
    return sum(
        compound(annuity.balance, EXISTING_ANNUITY_GROWTH_PCT, years)
        for annuity in snapshot.guaranteed_income.annuities
    )


def summarize_retirement(
    projection: ProjectionResult, snapshot: HouseholdSnapshot
) -> RetirementSummary:
    """Build the retirement summary for a projection.

    On the conversion path, the premiums actually taken from qualified
    accounts are added back to the combined value; the contracts hold
    qualified money.
    """
    retirement_rows = projection.retirement_rows()
    first_retirement_row = retirement_rows[0] if retirement_rows else None
    headline_row = first_retirement_row or (projection.rows[0] if projection.rows else None)

    annuity_value = existing_annuity_value_at_retirement(snapshot, projection.retirement_age)
    premium_add_back = projection.premiums_deducted.get("qualified", 0.0)

    current_balances = {category: 0.0 for category in ACCOUNT_CATEGORIES}
    for account in snapshot.accounts:
        current_balances[account.category] += account.balance

    return RetirementSummary(
        retirement_age=projection.retirement_age,
        first_year_income=headline_row.annual_total if headline_row else 0.0,
        first_year_monthly_income=headline_row.monthly_total if headline_row else 0.0,
        first_year_guaranteed_pct=(
            first_retirement_row.guaranteed_pct if first_retirement_row else None
        ),
        first_year_guaranteed_dollars=(
            first_retirement_row.guaranteed_dollars if first_retirement_row else None
        ),
        combined_future_value=projection.total_future_value + annuity_value + premium_add_back,
        existing_annuity_value=annuity_value,
        current_balances=current_balances,
        plan_start_age=projection.rows[0].client_age if projection.rows else None,
        plan_end_age=projection.rows[-1].client_age if projection.rows else None,
    )


class MilestoneComparison(BaseModel):
    """Current versus conversion path at one milestone."""

    label: str
    client_age: int
    current_total: float
    conversion_total: float
    current_guaranteed: float
    conversion_guaranteed: float
    current_guaranteed_pct: float
    conversion_guaranteed_pct: float


def compare_paths(comparison: ProjectionComparison) -> List[MilestoneComparison]:
    """Compare both paths at retirement and at ages 70 and 80.

    Milestones outside the plan fall back to the retirement row.
    """
    current = comparison.current
    conversion = comparison.conversion
    if not current.rows:
        return []

    retirement_row = current.row_at_age(current.retirement_age) or current.rows[0]
    milestones = [("retirement", retirement_row.client_age)]
    for age in COMPARISON_AGES:
        row = current.row_at_age(age) or retirement_row
        milestones.append((f"age {age}", row.client_age))

    results = []
    for label, age in milestones:
        current_row = current.row_at_age(age)
        conversion_row = conversion.row_at_age(age) or current_row
        results.append(
            MilestoneComparison(
                label=label,
                client_age=age,
                current_total=current_row.annual_total,
                conversion_total=conversion_row.annual_total,
                current_guaranteed=current_row.guaranteed_dollars,
                conversion_guaranteed=conversion_row.guaranteed_dollars,
                current_guaranteed_pct=current_row.guaranteed_pct,
                conversion_guaranteed_pct=conversion_row.guaranteed_pct,
            )
        )
    return results
