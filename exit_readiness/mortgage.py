"""Mortgage amortization and owner-cost schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class RateStep:
    """Mortgage rate in effect from `year` (0-based loan year) onward."""

    year: int
    rate: float


@dataclass(frozen=True)
class PurchaseDetails:
    """
    Terms of a property purchase.

    Attributes:
        property_price: Purchase price
        down_payment: Cash paid up front toward the price
        purchase_cost_rate: Transaction costs as a percentage of the price
        mortgage_years: Loan term in years
        interest_rate: Initial annual mortgage rate (%)
        owner_annual_cost: Maintenance fees and property tax per year
        rate_steps: Scheduled rate changes for a variable-rate loan
        owner_cost_escalation: Annual growth of owner costs (%)
    """

    property_price: float
    down_payment: float
    purchase_cost_rate: float = 7.0
    mortgage_years: int = 35
    interest_rate: float = 0.5
    owner_annual_cost: float = 40.0
    rate_steps: tuple[RateStep, ...] = field(default_factory=tuple)
    owner_cost_escalation: float = 0.0

    @property
    def loan_principal(self) -> float:
        """Amount borrowed (never negative)."""
        return max(0.0, self.property_price - self.down_payment)

    @property
    def purchase_costs(self) -> float:
        """Transaction costs paid at purchase."""
        return self.property_price * self.purchase_cost_rate / 100

    @property
    def upfront_outflow(self) -> float:
        """Cash leaving the household at purchase: down payment plus costs."""
        return self.down_payment + self.purchase_costs

    @property
    def monthly_payment(self) -> float:
        """First-year monthly mortgage payment."""
        rate = rate_for_year(self.interest_rate, self.rate_steps, 0)
        return compute_monthly_payment(self.loan_principal, rate, self.mortgage_years)


@dataclass(frozen=True)
class AmortizationYear:
    """Interest and principal paid during one loan year."""

    year: int
    interest: float
    principal: float
    ending_balance: float

    @property
    def payment(self) -> float:
        """Total paid to the lender during the year."""
        return self.interest + self.principal


def compute_monthly_payment(
    principal: float,
    annual_rate_percent: float,
    years: float,
) -> float:
    """
    Standard annuity payment for a fully amortizing loan.

    Args:
        principal: Loan amount
        annual_rate_percent: Annual interest rate in percent
        years: Loan term in years

    Returns:
        Monthly payment; straight-line division when the rate is zero and
        0 when there is nothing to repay.
    """
    if principal <= 0 or years <= 0:
        return 0.0

    monthly_rate = annual_rate_percent / 100 / 12
    n_payments = years * 12

    if monthly_rate == 0:
        return principal / n_payments

    growth = (1 + monthly_rate) ** n_payments
    return principal * monthly_rate * growth / (growth - 1)


def rate_for_year(
    base_rate: float,
    rate_steps: Iterable[RateStep],
    year: int,
) -> float:
    """Rate in effect during a loan year given the scheduled steps."""
    rate = base_rate
    for step in sorted(rate_steps, key=lambda s: s.year):
        if step.year > year:
            break
        rate = step.rate
    return rate


def amortize(
    principal: float,
    annual_rate_percent: float,
    years: int,
    rate_steps: Iterable[RateStep] = (),
) -> list[AmortizationYear]:
    """
    Build a yearly amortization table with monthly compounding.

    Whenever the rate changes, the payment is recomputed from the remaining
    balance over the remaining term. The final month retires whatever
    balance is left so the loan always closes at zero.
    """
    if principal <= 0 or years <= 0:
        return []

    steps = tuple(rate_steps)
    total_months = years * 12
    balance = principal
    current_rate: float | None = None
    payment = 0.0
    table: list[AmortizationYear] = []

    for year in range(years):
        rate = rate_for_year(annual_rate_percent, steps, year)
        if rate != current_rate:
            current_rate = rate
            payment = compute_monthly_payment(balance, rate, years - year)

        monthly_rate = rate / 100 / 12
        interest_paid = 0.0
        principal_paid = 0.0

        for month in range(12):
            interest = balance * monthly_rate
            if year * 12 + month == total_months - 1:
                principal_part = balance
            else:
                principal_part = min(max(payment - interest, 0.0), balance)
            balance -= principal_part
            interest_paid += interest
            principal_paid += principal_part

        table.append(
            AmortizationYear(
                year=year,
                interest=interest_paid,
                principal=principal_paid,
                ending_balance=balance,
            )
        )

    return table


def compute_yearly_housing_costs(details: PurchaseDetails, total_years: int) -> list[float]:
    """
    Per-year cost of owning the property for `total_years` years.

    Each year is the mortgage paid that year (zero once the loan is retired)
    plus the owner costs compounded at the escalation rate.
    """
    table = amortize(
        details.loan_principal,
        details.interest_rate,
        details.mortgage_years,
        details.rate_steps,
    )
    escalation = details.owner_cost_escalation / 100

    costs = []
    for year in range(max(0, total_years)):
        mortgage = table[year].payment if year < len(table) else 0.0
        owner = details.owner_annual_cost * (1 + escalation) ** year
        costs.append(mortgage + owner)
    return costs
