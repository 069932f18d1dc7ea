"""
Pydantic models for household planning snapshots.

This module defines the immutable input snapshot consumed by the projection
engine: client and spouse information, employment income, guaranteed income
sources, account buckets, and annuity conversion ("ALIGN") options.

Every numeric field carries a default so that a partially-filled form still
produces a valid snapshot.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AccountCategory = Literal["qualified", "roth", "taxable", "cash", "insurance"]
Owner = Literal["client", "spouse"]
OptionOwner = Literal["client", "spouse", "joint"]
ProductType = Literal["fixed_payout", "rate_based"]
BenefitOption = Literal["single_life", "joint"]

ACCOUNT_CATEGORIES: List[AccountCategory] = [
    "qualified",
    "roth",
    "taxable",
    "cash",
    "insurance",
]
OWNERS: List[Owner] = ["client", "spouse"]


class SnapshotModel(BaseModel):
    """Base class for frozen snapshot models."""

    model_config = ConfigDict(frozen=True)


class ClientInfo(SnapshotModel):
    """Primary household member."""

    name: str = Field(default="", description="Client name")
    current_age: int = Field(default=59, ge=0, le=120, description="Current age")
    retirement_age: int = Field(
        default=65, ge=0, le=120, description="Projected retirement age"
    )
    plan_age: int = Field(
        default=90, ge=0, le=120, description="Terminal age of the projection"
    )
    monthly_income_goal: float = Field(
        default=0, ge=0, description="Monthly income goal in today's dollars"
    )
    goal_inflation_pct: float = Field(
        default=2, description="Annual inflation applied to the income goal (%)"
    )


class SpouseInfo(SnapshotModel):
    """Spouse information (ignored when the household has no spouse)."""

    name: str = Field(default="", description="Spouse name")
    current_age: int = Field(default=57, ge=0, le=120, description="Current age")
    retirement_age: int = Field(
        default=65, ge=0, le=120, description="Projected retirement age"
    )
    plan_age: int = Field(
        default=90, ge=0, le=120, description="Terminal age of the projection"
    )


class SideIncomeEntry(SnapshotModel):
    """Bounded side income earned by the client between two ages."""

    amount: float = Field(default=0, ge=0, description="Annual amount")
    start_age: int = Field(default=0, ge=0, le=120, description="First age received")
    end_age: int = Field(default=0, ge=0, le=120, description="Last age received")


class WorkIncome(SnapshotModel):
    """Employment income for one household member."""

    annual_amount: float = Field(default=0, ge=0, description="Current annual income")
    stop_working_age: int = Field(
        default=65, ge=0, le=120, description="Age at which earned income stops"
    )


class IncomeInputs(SnapshotModel):
    """Employment income inputs for the household."""

    cola_pct: float = Field(default=2, description="Annual income growth (%)")
    tax_rate_pct: float = Field(
        default=25, ge=0, le=100, description="Flat tax rate on earned income (%)"
    )
    client: WorkIncome = Field(default_factory=WorkIncome)
    spouse: WorkIncome = Field(default_factory=WorkIncome)
    side_income: List[SideIncomeEntry] = Field(
        default_factory=list, description="Bounded side-income entries"
    )


class SocialSecurity(SnapshotModel):
    """Social Security benefit for one household member."""

    monthly_benefit: float = Field(default=0, ge=0, description="Monthly benefit")
    start_age: int = Field(default=65, ge=0, le=120, description="Claiming age")
    cola_pct: float = Field(default=2, description="Annual COLA (%)")
    tax_rate_pct: float = Field(
        default=0, ge=0, le=100, description="Flat tax rate on the benefit (%)"
    )


class IncomeSource(SnapshotModel):
    """Base class for monthly guaranteed income sources."""

    name: str = Field(default="", description="Display name")
    amount: float = Field(default=0, ge=0, description="Monthly amount")
    start_age: int = Field(default=65, ge=0, le=120, description="First age received")
    end_age: Optional[int] = Field(
        default=None, ge=0, le=120, description="Last age received (None = for life)"
    )
    cola_pct: float = Field(default=0, description="Annual COLA (%)")
    tax_rate_pct: float = Field(
        default=0, ge=0, le=100, description="Flat tax rate on the income (%)"
    )
    owner: Owner = Field(default="client", description="Who receives this income")

    def is_active(self, owner_age: int) -> bool:
        """Check whether the source pays at the owner's age."""
        if owner_age < self.start_age:
            return False
        return self.end_age is None or owner_age <= self.end_age

    def annual_amount(self, owner_age: int) -> float:
        """Annual income at the owner's age, COLA-compounded from the start age."""
        if not self.is_active(owner_age):
            return 0.0
        return compound(self.amount * 12, self.cola_pct, owner_age - self.start_age)


class PensionOrAnnuityIncome(IncomeSource):
    """Pension or existing annuity income with survivor continuation."""

    kind: Literal["pension", "annuity"] = Field(default="pension")
    survivor_pct: float = Field(
        default=100,
        ge=0,
        le=100,
        description="Share of the benefit continuing after the client's death (%)",
    )
    balance: float = Field(
        default=0, ge=0, description="Current contract value (annuities only)"
    )


class RentalIncome(IncomeSource):
    """Rental income (never reduced at death)."""


class GuaranteedIncomeInputs(SnapshotModel):
    """All guaranteed income sources for the household."""

    social_security_client: SocialSecurity = Field(default_factory=SocialSecurity)
    social_security_spouse: SocialSecurity = Field(default_factory=SocialSecurity)
    pensions: List[PensionOrAnnuityIncome] = Field(default_factory=list)
    annuities: List[PensionOrAnnuityIncome] = Field(default_factory=list)
    rentals: List[RentalIncome] = Field(default_factory=list)


class AccountBucket(SnapshotModel):
    """A single investment account."""

    category: AccountCategory = Field(..., description="Account category")
    name: str = Field(default="", description="Account name")
    owner: Owner = Field(default="client", description="Account owner")
    balance: float = Field(default=0, ge=0, description="Current balance")
    annual_contribution: float = Field(
        default=0, ge=0, description="Annual contribution until retirement"
    )
    growth_rate_pct: float = Field(default=0, description="Annual growth rate (%)")
    distribution_rate_pct: float = Field(
        default=0, ge=0, description="Annual distribution rate in retirement (%)"
    )
    tax_rate_pct: float = Field(
        default=0, ge=0, le=100, description="Flat tax rate on distributions (%)"
    )


class AlignOption(SnapshotModel):
    """An annuity conversion option funded from an account category."""

    name: str = Field(default="", description="Display name or carrier")
    premium_amount: float = Field(default=0, ge=0, description="Premium converted")
    referenced_category: AccountCategory = Field(
        default="qualified", description="Account category funding the premium"
    )
    income_start_age: int = Field(
        default=65, ge=0, le=120, description="Owner age when payouts begin"
    )
    owner: OptionOwner = Field(default="client", description="Contract owner")
    product_type: ProductType = Field(
        default="fixed_payout", description="Fixed-payout or rate-based product"
    )
    payout_amount: float = Field(
        default=0, ge=0, description="Flat annual payout (fixed-payout products)"
    )
    guaranteed_rate_pct: float = Field(
        default=0, ge=0, description="Guaranteed annual rate (rate-based products)"
    )
    term_years: Optional[Literal[3, 5, 7]] = Field(
        default=None, description="Rate guarantee term (informational)"
    )
    benefit_option: BenefitOption = Field(
        default="single_life", description="Benefit continuation (fixed-payout)"
    )

    @property
    def deduction_owner(self) -> Owner:
        """Owner bucket the premium is taken from."""
        return "spouse" if self.owner == "spouse" else "client"


class HouseholdSnapshot(SnapshotModel):
    """Complete, immutable set of household inputs for one computation."""

    has_spouse: bool = Field(default=False, description="Whether a spouse is present")
    client: ClientInfo = Field(default_factory=ClientInfo)
    spouse: SpouseInfo = Field(default_factory=SpouseInfo)
    client_tax_rate_pct: float = Field(
        default=25, ge=0, le=100, description="Tax rate assumption for the goal (%)"
    )
    accounts_tax_rate_pct: float = Field(
        default=25, ge=0, le=100, description="Tax rate on account draws (%)"
    )
    income: IncomeInputs = Field(default_factory=IncomeInputs)
    guaranteed_income: GuaranteedIncomeInputs = Field(
        default_factory=GuaranteedIncomeInputs
    )
    accounts: List[AccountBucket] = Field(default_factory=list)
    align_options: List[AlignOption] = Field(default_factory=list)

    def spouse_age_at(self, year_index: int) -> int:
        """Spouse age in a plan year, 0 when there is no spouse."""
        if not self.has_spouse:
            return 0
        return self.spouse.current_age + year_index

    def owner_age(self, owner: str, client_age: int, spouse_age: int) -> int:
        """Age used for timing a source owned by ``owner``."""
        return spouse_age if owner == "spouse" else client_age


def compound(value: float, rate_pct: float, years: int) -> float:
    """Compound ``value`` at ``rate_pct`` percent for ``years`` years."""
    return value * (1 + rate_pct / 100) ** years
