"""Tests for mortgage amortization and housing cost schedules."""

import pytest

from exit_readiness.mortgage import (
    PurchaseDetails,
    RateStep,
    amortize,
    compute_monthly_payment,
    compute_yearly_housing_costs,
    rate_for_year,
)


class TestMonthlyPayment:
    """Tests for the annuity formula."""

    def test_nothing_to_repay(self):
        """Zero principal or term gives zero payment."""
        assert compute_monthly_payment(0, 1.0, 35) == 0.0
        assert compute_monthly_payment(1_000, 1.0, 0) == 0.0

    def test_zero_rate_straight_line(self):
        """Zero rate divides the principal evenly."""
        assert compute_monthly_payment(1_200, 0, 10) == pytest.approx(10.0)

    def test_known_annuity(self):
        """1% a month over 12 months."""
        assert compute_monthly_payment(1_000, 12.0, 1) == pytest.approx(88.8488, abs=1e-3)


class TestRateSteps:
    """Tests for variable-rate schedules."""

    def test_rate_for_year(self):
        """Steps take effect from their year onward."""
        steps = (RateStep(year=10, rate=1.1), RateStep(year=5, rate=0.8))
        assert rate_for_year(0.5, steps, 0) == 0.5
        assert rate_for_year(0.5, steps, 4) == 0.5
        assert rate_for_year(0.5, steps, 5) == 0.8
        assert rate_for_year(0.5, steps, 12) == 1.1


class TestAmortize:
    """Tests for amortization tables."""

    def test_empty_for_no_loan(self):
        """No table without a loan."""
        assert amortize(0, 1.0, 35) == []

    def test_principal_fully_repaid(self):
        """Principal payments sum to the loan and the balance closes at zero."""
        table = amortize(3_000, 1.0, 35)
        assert len(table) == 35
        assert sum(year.principal for year in table) == pytest.approx(3_000)
        assert table[-1].ending_balance == pytest.approx(0.0, abs=1e-9)

    def test_repaid_with_rate_steps(self):
        """Loans with rate changes still close at zero."""
        steps = (RateStep(year=5, rate=1.5), RateStep(year=15, rate=2.0))
        table = amortize(3_000, 0.5, 35, steps)
        assert sum(year.principal for year in table) == pytest.approx(3_000)
        assert table[-1].ending_balance == pytest.approx(0.0, abs=1e-9)

    def test_payment_rises_with_rate(self):
        """A rate increase raises the yearly payment."""
        table = amortize(3_000, 0.5, 35, (RateStep(year=5, rate=1.5),))
        assert table[5].payment > table[4].payment

    def test_balance_decreases(self):
        """Balance falls every year."""
        table = amortize(2_000, 1.0, 20)
        balances = [year.ending_balance for year in table]
        assert all(b2 < b1 for b1, b2 in zip(balances, balances[1:]))


class TestPurchaseDetails:
    """Tests for purchase-derived amounts."""

    def test_derived_amounts(self):
        """Loan, costs and outflow follow from the price."""
        details = PurchaseDetails(property_price=5_000, down_payment=1_000)
        assert details.loan_principal == 4_000
        assert details.purchase_costs == pytest.approx(350)
        assert details.upfront_outflow == pytest.approx(1_350)

    def test_no_loan_when_paid_in_full(self):
        """Down payment above price leaves no loan."""
        details = PurchaseDetails(property_price=1_000, down_payment=1_500)
        assert details.loan_principal == 0.0
        assert details.monthly_payment == 0.0


class TestYearlyHousingCosts:
    """Tests for owner cost schedules."""

    def test_mortgage_then_owner_costs(self):
        """Mortgage years include the payment; later years only owner costs."""
        details = PurchaseDetails(
            property_price=3_000,
            down_payment=500,
            mortgage_years=10,
            interest_rate=0.0,
            owner_annual_cost=20,
        )
        costs = compute_yearly_housing_costs(details, 15)
        assert len(costs) == 15
        assert costs[0] == pytest.approx(270)
        assert costs[9] == pytest.approx(270)
        assert costs[10] == pytest.approx(20)

    def test_owner_cost_escalation(self):
        """Owner costs compound at the escalation rate."""
        details = PurchaseDetails(
            property_price=1_000,
            down_payment=1_000,
            owner_annual_cost=40,
            owner_cost_escalation=1.5,
        )
        costs = compute_yearly_housing_costs(details, 3)
        assert costs[2] == pytest.approx(40 * 1.015**2)
