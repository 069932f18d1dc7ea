"""
Account pool aggregation.

Accounts of the same category are treated as one pool per category and one
pool per (category, owner). Balances and contributions are summed while growth
and distribution rates are balance-weighted averages.
"""

from typing import Dict, Iterable, List

from pydantic import BaseModel, Field

from .household import ACCOUNT_CATEGORIES, OWNERS, AccountBucket


class AccountPool(BaseModel):
    """Aggregated view of one or more account buckets."""

    balance: float = Field(default=0.0, ge=0, description="Summed balance")
    annual_contribution: float = Field(
        default=0.0, ge=0, description="Summed annual contribution"
    )
    growth_rate_pct: float = Field(
        default=0.0, description="Balance-weighted growth rate (%)"
    )
    distribution_rate_pct: float = Field(
        default=0.0, description="Balance-weighted distribution rate (%)"
    )


def aggregate_pool(accounts: Iterable[AccountBucket]) -> AccountPool:
    """Collapse accounts into one pool.

    Rates are weighted by balance: ``sum(balance * rate) / sum(balance)``,
    and are 0 when the summed balance is 0.
    """
    balance = 0.0
    contributions = 0.0
    weighted_growth = 0.0
    weighted_distribution = 0.0

    for account in accounts:
        balance += account.balance
        contributions += account.annual_contribution
        weighted_growth += account.balance * account.growth_rate_pct
        weighted_distribution += account.balance * account.distribution_rate_pct

    if balance > 0:
        growth = weighted_growth / balance
        distribution = weighted_distribution / balance
    else:
        growth = 0.0
        distribution = 0.0

    return AccountPool(
        balance=balance,
        annual_contribution=contributions,
        growth_rate_pct=growth,
        distribution_rate_pct=distribution,
    )


def aggregate_by_category(accounts: List[AccountBucket]) -> Dict[str, AccountPool]:
    """Aggregate accounts into one pool per category."""
    return {
        category: aggregate_pool(a for a in accounts if a.category == category)
        for category in ACCOUNT_CATEGORIES
    }


def aggregate_by_category_and_owner(
    accounts: List[AccountBucket],
) -> Dict[str, Dict[str, AccountPool]]:
    """Aggregate accounts into one pool per (category, owner)."""
    return {
        category: {
            owner: aggregate_pool(
                a for a in accounts if a.category == category and a.owner == owner
            )
            for owner in OWNERS
        }
        for category in ACCOUNT_CATEGORIES
    }
