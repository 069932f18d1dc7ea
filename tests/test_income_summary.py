"""
Tests for post-tax views, shortage/surplus and path summaries.
"""

import pytest

from income_planner.models.household import (
    AccountBucket,
    AlignOption,
    ClientInfo,
    GuaranteedIncomeInputs,
    HouseholdSnapshot,
    PensionOrAnnuityIncome,
    RentalIncome,
    SocialSecurity,
)
from income_planner.models.income_summary import (
    TaxRates,
    apply_tax,
    compare_paths,
    existing_annuity_value_at_retirement,
    post_tax_by_year,
    shortage_surplus,
    shortage_surplus_by_year,
    summarize_retirement,
)
from income_planner.models.projection import project, run_projection


class TestTaxRates:
    """Test display tax rates derived from a snapshot."""

    def test_defaults(self, married_snapshot):
        rates = TaxRates.from_snapshot(married_snapshot)

        assert rates.earned_pct == 25
        assert rates.social_security_pct == 0
        assert rates.pension_other_pct == 0
        assert rates.accounts_pct == 25

    def test_social_security_rate_is_mean(self):
        snapshot = HouseholdSnapshot(
            guaranteed_income=GuaranteedIncomeInputs(
                social_security_client=SocialSecurity(tax_rate_pct=20),
                social_security_spouse=SocialSecurity(tax_rate_pct=10),
            )
        )

        assert TaxRates.from_snapshot(snapshot).social_security_pct == pytest.approx(15)

    def test_pension_rate_precedence(self):
        """Test pension, then annuity, then rental rates."""
        rental_only = HouseholdSnapshot(
            guaranteed_income=GuaranteedIncomeInputs(
                rentals=[RentalIncome(amount=100, tax_rate_pct=30)]
            )
        )
        with_annuity = HouseholdSnapshot(
            guaranteed_income=GuaranteedIncomeInputs(
                annuities=[PensionOrAnnuityIncome(kind="annuity", tax_rate_pct=18)],
                rentals=[RentalIncome(amount=100, tax_rate_pct=30)],
            )
        )

        assert TaxRates.from_snapshot(rental_only).pension_other_pct == 30
        assert TaxRates.from_snapshot(with_annuity).pension_other_pct == 18


class TestApplyTax:
    """Test the after-tax view of a row."""

    def test_flat_rates(self, married_snapshot):
        row = run_projection(married_snapshot).rows[0]
        rates = TaxRates(social_security_pct=25, accounts_pct=20)

        post_tax = apply_tax(row, rates)

        assert post_tax.social_security == pytest.approx(27000)
        assert post_tax.account_draws["qualified"] == pytest.approx(9600)
        assert post_tax.account_draws["roth"] == pytest.approx(2400)
        assert post_tax.combined_draws == pytest.approx(12000)
        assert post_tax.annual_total == pytest.approx(39000)
        assert post_tax.monthly_total == pytest.approx(3250)
        assert post_tax.guaranteed_dollars == pytest.approx(27000)
        assert post_tax.guaranteed_pct == pytest.approx(27000 / 39000 * 100)

    def test_conversion_income_taxed_as_pension(self, married_snapshot):
        snapshot = married_snapshot.model_copy(
            update={"align_options": [AlignOption(premium_amount=10000, payout_amount=1000)]}
        )
        row = run_projection(snapshot, with_conversion=True).rows[0]

        post_tax = apply_tax(row, TaxRates(pension_other_pct=10))

        assert post_tax.pension_other == pytest.approx(900)

    def test_zero_income(self):
        row = run_projection(HouseholdSnapshot()).rows[0]

        post_tax = apply_tax(row, TaxRates(earned_pct=50))

        assert post_tax.annual_total == 0
        assert post_tax.guaranteed_pct == 0

    def test_by_year_uses_snapshot_rates(self, married_snapshot):
        projection = run_projection(married_snapshot)

        rows = post_tax_by_year(projection, married_snapshot)

        assert len(rows) == 26
        assert rows[0].social_security == pytest.approx(36000)
        assert rows[0].combined_draws == pytest.approx(11250)


class TestShortageSurplus:
    """Test income versus goal."""

    def test_shortage(self, married_snapshot):
        row = run_projection(married_snapshot).rows[0]

        result = shortage_surplus(row)

        assert result.total_income == pytest.approx(51000)
        assert result.target == pytest.approx(60000)
        assert result.amount == pytest.approx(-9000)
        assert result.pct == pytest.approx(-15)

    def test_post_tax_goal(self, married_snapshot):
        row = run_projection(married_snapshot).rows[0]

        result = shortage_surplus(row, TaxRates(), goal_tax_rate_pct=25)

        assert result.target == pytest.approx(45000)
        assert result.amount == pytest.approx(6000)

    def test_no_goal(self, single_client_snapshot):
        row = run_projection(single_client_snapshot).rows[0]

        result = shortage_surplus(row)

        assert result.target == 0
        assert result.pct is None

    def test_by_year(self, married_snapshot):
        projection = run_projection(married_snapshot)

        pre_tax = shortage_surplus_by_year(projection, married_snapshot)
        post_tax = shortage_surplus_by_year(projection, married_snapshot, post_tax=True)

        assert len(pre_tax) == len(projection.rows) == 26
        assert pre_tax[0].amount == pytest.approx(-9000)
        # 36,000 untaxed benefits plus 15,000 draws at 25% vs a 45,000 goal
        assert post_tax[0].total_income == pytest.approx(47250)
        assert post_tax[0].amount == pytest.approx(2250)


class TestRetirementSummary:
    """Test headline values at retirement."""

    def test_existing_annuity_growth(self):
        snapshot = HouseholdSnapshot(
            client=ClientInfo(current_age=60, retirement_age=65),
            guaranteed_income=GuaranteedIncomeInputs(
                annuities=[
                    PensionOrAnnuityIncome(kind="annuity", balance=10000),
                    PensionOrAnnuityIncome(kind="annuity", balance=5000),
                ]
            ),
        )

        assert existing_annuity_value_at_retirement(snapshot, 65) == pytest.approx(
            15000 * 1.02**5
        )
        assert existing_annuity_value_at_retirement(snapshot, 55) == pytest.approx(15000)

    def test_current_path(self, single_client_snapshot):
        projection = run_projection(single_client_snapshot)
        future_value = 250000 * 1.07**6

        summary = summarize_retirement(projection, single_client_snapshot)

        assert summary.retirement_age == 65
        assert summary.first_year_income == pytest.approx(future_value * 0.04)
        assert summary.first_year_monthly_income == pytest.approx(future_value * 0.04 / 12)
        assert summary.first_year_guaranteed_pct == 0
        assert summary.combined_future_value == pytest.approx(future_value)
        assert summary.existing_annuity_value == 0
        assert summary.current_balances["qualified"] == 250000
        assert summary.current_balances["cash"] == 0
        assert summary.plan_start_age == 59
        assert summary.plan_end_age == 90

    def test_conversion_path_adds_back_premiums(self, single_client_snapshot):
        snapshot = single_client_snapshot.model_copy(
            update={"align_options": [AlignOption(premium_amount=50000, payout_amount=3000)]}
        )
        projection = run_projection(snapshot, with_conversion=True)

        summary = summarize_retirement(projection, snapshot)

        assert summary.combined_future_value == pytest.approx(200000 * 1.07**6 + 50000)
        assert summary.first_year_guaranteed_dollars == pytest.approx(3000)

    @staticmethod
    def _retired_snapshot(balance, options):
        return HouseholdSnapshot(
            client=ClientInfo(current_age=65, retirement_age=65, plan_age=70),
            accounts=[AccountBucket(category="qualified", balance=balance)],
            align_options=options,
        )

    def test_invalid_option_is_not_added_back(self):
        """Test that a premium with no payout leaves the combined value unchanged."""
        snapshot = self._retired_snapshot(
            100000, [AlignOption(premium_amount=50000, payout_amount=0)]
        )

        current = summarize_retirement(run_projection(snapshot), snapshot)
        conversion = summarize_retirement(
            run_projection(snapshot, with_conversion=True), snapshot
        )

        assert current.combined_future_value == pytest.approx(100000)
        assert conversion.combined_future_value == pytest.approx(100000)

    def test_add_back_capped_at_balance(self):
        """Test that a premium above the pool balance adds back only the balance."""
        snapshot = self._retired_snapshot(
            10000, [AlignOption(premium_amount=50000, payout_amount=2500)]
        )
        projection = run_projection(snapshot, with_conversion=True)

        summary = summarize_retirement(projection, snapshot)

        assert projection.premiums_deducted["qualified"] == pytest.approx(10000)
        assert summary.combined_future_value == pytest.approx(10000)

    def test_other_categories_not_added_back(self):
        snapshot = HouseholdSnapshot(
            client=ClientInfo(current_age=65, retirement_age=65, plan_age=70),
            accounts=[AccountBucket(category="taxable", balance=40000)],
            align_options=[
                AlignOption(
                    premium_amount=30000,
                    payout_amount=2000,
                    referenced_category="taxable",
                )
            ],
        )
        projection = run_projection(snapshot, with_conversion=True)

        summary = summarize_retirement(projection, snapshot)

        assert projection.premiums_deducted["taxable"] == pytest.approx(30000)
        assert summary.combined_future_value == pytest.approx(10000)

    def test_no_retirement_rows(self):
        snapshot = HouseholdSnapshot(
            client=ClientInfo(current_age=50, retirement_age=70, plan_age=55)
        )

        summary = summarize_retirement(run_projection(snapshot), snapshot)

        assert summary.first_year_guaranteed_pct is None
        assert summary.first_year_guaranteed_dollars is None
        assert summary.first_year_income == 0
        assert summary.plan_end_age == 55


class TestComparePaths:
    """Test milestone comparisons between the two paths."""

    def test_milestones(self, married_snapshot):
        snapshot = married_snapshot.model_copy(
            update={"align_options": [AlignOption(premium_amount=100000, payout_amount=7000)]}
        )

        milestones = compare_paths(project(snapshot))

        assert [m.label for m in milestones] == ["retirement", "age 70", "age 80"]
        assert [m.client_age for m in milestones] == [65, 70, 80]

        at_retirement = milestones[0]
        assert at_retirement.current_guaranteed == pytest.approx(36000)
        assert at_retirement.conversion_guaranteed == pytest.approx(43000)
        # qualified draw falls from 12,000 to 8,000 while the payout adds 7,000
        assert at_retirement.conversion_total - at_retirement.current_total == pytest.approx(
            3000
        )
        assert at_retirement.conversion_guaranteed_pct > at_retirement.current_guaranteed_pct

    def test_milestones_outside_plan_fall_back(self, married_snapshot):
        snapshot = married_snapshot.model_copy(
            update={
                "client": ClientInfo(
                    current_age=65, retirement_age=65, plan_age=75, monthly_income_goal=5000
                )
            }
        )

        milestones = compare_paths(project(snapshot))

        assert [m.client_age for m in milestones] == [65, 70, 65]
        assert milestones[0].current_total == milestones[0].conversion_total

    def test_empty_plan(self):
        snapshot = HouseholdSnapshot(
            client=ClientInfo(current_age=80, retirement_age=65, plan_age=70)
        )

        assert compare_paths(project(snapshot)) == []
