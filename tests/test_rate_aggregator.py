"""
Tests for account pool aggregation.
"""

import pytest

from income_planner.models.household import AccountBucket
from income_planner.models.rate_aggregator import (
    AccountPool,
    aggregate_by_category,
    aggregate_by_category_and_owner,
    aggregate_pool,
)


class TestAggregatePool:
    """Test balance-weighted pool aggregation."""

    def test_balance_weighted_growth_rate(self):
        """Test that rates are weighted by balance, not averaged."""
        accounts = [
            AccountBucket(category="qualified", balance=100, growth_rate_pct=4),
            AccountBucket(category="qualified", balance=300, growth_rate_pct=8),
        ]

        pool = aggregate_pool(accounts)

        assert pool.balance == 400
        assert pool.growth_rate_pct == pytest.approx(7.0)

    def test_distribution_rate_and_contributions(self):
        """Test distribution weighting and contribution sums."""
        accounts = [
            AccountBucket(
                category="taxable",
                balance=900,
                annual_contribution=1000,
                distribution_rate_pct=3,
            ),
            AccountBucket(
                category="taxable",
                balance=100,
                annual_contribution=500,
                distribution_rate_pct=13,
            ),
        ]

        pool = aggregate_pool(accounts)

        assert pool.annual_contribution == 1500
        assert pool.distribution_rate_pct == pytest.approx(4.0)

    def test_zero_balance_rates_are_zero(self):
        """Test that a pool with no balance has zero rates."""
        accounts = [
            AccountBucket(
                category="cash",
                balance=0,
                annual_contribution=2000,
                growth_rate_pct=5,
                distribution_rate_pct=4,
            )
        ]

        pool = aggregate_pool(accounts)

        assert pool.balance == 0
        assert pool.annual_contribution == 2000
        assert pool.growth_rate_pct == 0
        assert pool.distribution_rate_pct == 0

    def test_empty_pool(self):
        """Test aggregating no accounts."""
        assert aggregate_pool([]) == AccountPool()


class TestAggregateByCategory:
    """Test aggregation by category and by owner."""

    def test_every_category_present(self):
        """Test that empty categories aggregate to zero."""
        pools = aggregate_by_category([])

        assert set(pools) == {"qualified", "roth", "taxable", "cash", "insurance"}
        assert all(pool.balance == 0 for pool in pools.values())

    def test_categories_are_independent(self):
        """Test that accounts only feed their own category."""
        accounts = [
            AccountBucket(category="qualified", balance=1000, growth_rate_pct=6),
            AccountBucket(category="roth", balance=500, growth_rate_pct=10),
        ]

        pools = aggregate_by_category(accounts)

        assert pools["qualified"].balance == 1000
        assert pools["qualified"].growth_rate_pct == pytest.approx(6)
        assert pools["roth"].balance == 500
        assert pools["roth"].growth_rate_pct == pytest.approx(10)
        assert pools["cash"].balance == 0

    def test_owner_pools(self):
        """Test that each owner gets an independently weighted pool."""
        accounts = [
            AccountBucket(category="qualified", owner="client", balance=100, growth_rate_pct=4),
            AccountBucket(category="qualified", owner="client", balance=300, growth_rate_pct=8),
            AccountBucket(category="qualified", owner="spouse", balance=50, growth_rate_pct=2),
        ]

        pools = aggregate_by_category_and_owner(accounts)

        assert pools["qualified"]["client"].balance == 400
        assert pools["qualified"]["client"].growth_rate_pct == pytest.approx(7)
        assert pools["qualified"]["spouse"].balance == 50
        assert pools["qualified"]["spouse"].growth_rate_pct == pytest.approx(2)
        assert pools["roth"]["spouse"].balance == 0
