"""Per-age income, expense and lump-sum calculators.

Everything here is deterministic: given a profile and an age, the cash flow
for that year is fixed. Only investment returns are random, so a profile's
cash flow is tabulated once per simulation in a CashFlowSchedule.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

import numpy as np

from exit_readiness.events import (
    ExpenseEvent,
    HousingPurchase,
    IncomeEvent,
    LifeEvent,
    LumpSumEvent,
    PartialRetirement,
    RentalIncome,
    Target,
    normalize_events,
)
from exit_readiness.mortgage import PurchaseDetails, compute_monthly_payment, compute_yearly_housing_costs
from exit_readiness.pension import annual_pension
from exit_readiness.profile import Profile
from exit_readiness.results import CashFlowBreakdown
from exit_readiness.tax_config import DEFAULT_PENSION_RULES, DIVIDEND_YIELD, POST_RETIRE_INCOME_TAX_RATE
from exit_readiness.taxes import apply_tax

MAX_AGE = 100


def inflation_factor(profile: Profile, age: int) -> float:
    """Price level at `age` relative to today."""
    return (1 + profile.inflation_rate / 100) ** (age - profile.current_age)


def income_adjustment(events: Iterable[LifeEvent], age: int, target: Target) -> float:
    """Net change to one earner's gross income from active income events."""
    return sum(
        e.signed_amount
        for e in events
        if isinstance(e, IncomeEvent) and e.target == target and e.is_active(age)
    )


def rental_income(events: Iterable[LifeEvent], age: int) -> float:
    return sum(e.amount for e in events if isinstance(e, RentalIncome) and e.is_active(age))


def net_income(profile: Profile, age: int, pension: float | None = None) -> float:
    """
    Household take-home income for the year the primary earner is `age`.

    Args:
        profile: Household profile
        age: Primary earner's age
        pension: Precomputed annual pension; computed from the profile when None

    Returns:
        Net income after tax
    """
    events = normalize_events(profile.life_events)
    self_retired = age >= profile.target_retire_age
    partner_retired = age >= profile.partner_stop_age

    income = rental_income(events, age)

    if not self_retired:
        self_gross = (
            profile.gross_income
            + profile.rsu_annual
            + profile.side_income_net
            + income_adjustment(events, age, Target.SELF)
        )
        income += apply_tax(self_gross, profile.use_auto_tax_rate, profile.effective_tax_rate)

    if profile.is_couple and not partner_retired:
        partner_gross = (
            profile.partner_gross_income
            + profile.partner_rsu_annual
            + income_adjustment(events, age, Target.PARTNER)
        )
        income += apply_tax(partner_gross, profile.use_auto_tax_rate, profile.effective_tax_rate)

    for event in events:
        if not isinstance(event, PartialRetirement) or not event.is_active(age):
            continue
        retired = self_retired if event.target == Target.SELF else partner_retired
        if retired:
            income += event.amount * (1 - POST_RETIRE_INCOME_TAX_RATE)

    if self_retired:
        if profile.post_retire_income > 0 and age < profile.post_retire_income_end_age:
            income += profile.post_retire_income * (1 - POST_RETIRE_INCOME_TAX_RATE)
        if age >= DEFAULT_PENSION_RULES.start_age:
            income += annual_pension(profile) if pension is None else pension

    return income


@lru_cache(maxsize=64)
def _purchase_schedule(details: PurchaseDetails, years: int) -> tuple[float, ...]:
    return tuple(compute_yearly_housing_costs(details, years))


def _latest_purchase(events: Iterable[LifeEvent], age: int) -> HousingPurchase | None:
    purchases = [e for e in events if isinstance(e, HousingPurchase) and e.age <= age]
    if not purchases:
        return None
    return max(purchases, key=lambda e: e.age)


def existing_mortgage_annual(profile: Profile) -> float:
    """Annual payment on the mortgage the household already carries."""
    if profile.mortgage_monthly_payment > 0:
        return profile.mortgage_monthly_payment * 12
    return 12 * compute_monthly_payment(
        profile.mortgage_principal,
        profile.mortgage_interest_rate,
        profile.mortgage_years_remaining,
    )


def housing_cost(profile: Profile, age: int, override: float | None = None) -> float:
    """
    Housing cost for one year.

    Precedence: an explicit override (used verbatim), then a housing
    purchase event that has already happened, then the profile's status.
    Rent inflates at the rent inflation rate. Owners pay the existing
    mortgage while it has years left, plus the part of
    `housing_cost_annual` that is not mortgage; these stay nominal.
    """
    if override is not None:
        return override

    purchase = _latest_purchase(normalize_events(profile.life_events), age)
    if purchase is not None:
        schedule = _purchase_schedule(purchase.purchase, MAX_AGE - purchase.age + 1)
        offset = age - purchase.age
        return schedule[offset] if offset < len(schedule) else 0.0

    years_elapsed = age - profile.current_age

    if profile.home_status.pays_mortgage:
        mortgage = existing_mortgage_annual(profile)
        other_costs = max(0.0, profile.housing_cost_annual - mortgage)
        if years_elapsed < profile.mortgage_years_remaining:
            return mortgage + other_costs
        return other_costs

    return profile.housing_cost_annual * (1 + profile.effective_rent_inflation / 100) ** years_elapsed


def expenses(
    profile: Profile,
    age: int,
    inflation: float | None = None,
    housing_override: float | None = None,
    include_passive_income: bool = True,
) -> float:
    """
    Household spending for one year, floored at zero.

    Args:
        profile: Household profile
        age: Primary earner's age
        inflation: Price-level factor; derived from the profile when None
        housing_override: Housing cost to use verbatim for this year
        include_passive_income: Net retirement passive income off the total
    """
    factor = inflation_factor(profile, age) if inflation is None else inflation
    events = normalize_events(profile.life_events)

    total = profile.living_cost_annual * factor + housing_cost(profile, age, housing_override)
    total += sum(
        e.signed_amount * factor for e in events if isinstance(e, ExpenseEvent) and e.is_active(age)
    )

    if age >= profile.target_retire_age:
        total *= profile.retire_spending_multiplier
        if include_passive_income:
            total -= profile.retire_passive_income

    return max(0.0, total)


def asset_gain(events: Iterable[LifeEvent], age: int) -> float:
    """Sum of one-time lump sums landing exactly at `age`."""
    return sum(
        e.lump_sum for e in normalize_events(events) if isinstance(e, LumpSumEvent) and e.age == age
    )


@dataclass(frozen=True)
class CashFlowSchedule:
    """
    Deterministic per-age cash flow for one profile.

    All arrays are aligned with `ages`, which runs from the current age to
    the final simulated age inclusive.
    """

    ages: np.ndarray
    net_income: np.ndarray
    expenses: np.ndarray
    contributions: np.ndarray
    asset_gains: np.ndarray
    initial_assets: float
    expected_return: float  # decimal
    volatility: float
    retire_age: int

    @property
    def n_steps(self) -> int:
        return len(self.ages)

    @property
    def net_cash_flow(self) -> np.ndarray:
        return self.net_income - self.expenses

    def index_of(self, age: int) -> int | None:
        offset = age - int(self.ages[0])
        if 0 <= offset < self.n_steps:
            return offset
        return None


def build_cash_flow_schedule(
    profile: Profile,
    housing_costs: Sequence[float] | None = None,
    max_age: int = MAX_AGE,
) -> CashFlowSchedule:
    """
    Tabulate income, expenses, contributions and lump sums per age.

    Args:
        profile: Household profile
        housing_costs: Per-year housing cost override indexed by years from
            the current age; years past its end fall back to the profile
        max_age: Final simulated age
    """
    ages = np.arange(profile.current_age, max_age + 1)
    pension = annual_pension(profile)

    incomes = np.empty(len(ages))
    spending = np.empty(len(ages))
    contributions = np.zeros(len(ages))
    gains = np.empty(len(ages))

    for i, age in enumerate(ages.tolist()):
        override = None
        if housing_costs is not None and i < len(housing_costs):
            override = housing_costs[i]
        incomes[i] = net_income(profile, age, pension=pension)
        spending[i] = expenses(profile, age, housing_override=override)
        if age < profile.target_retire_age:
            contributions[i] = profile.dc_contribution_annual
        gains[i] = asset_gain(profile.life_events, age)

    return CashFlowSchedule(
        ages=ages,
        net_income=incomes,
        expenses=spending,
        contributions=contributions,
        asset_gains=gains,
        initial_assets=profile.total_assets,
        expected_return=profile.expected_return / 100,
        volatility=profile.volatility,
        retire_age=profile.target_retire_age,
    )


def cash_flow_breakdown(profile: Profile) -> CashFlowBreakdown:
    """Cash flow in the first year of retirement, in that year's money."""
    retire_age = profile.target_retire_age
    pension = annual_pension(profile) if retire_age >= DEFAULT_PENSION_RULES.start_age else 0.0

    income = profile.retire_passive_income + net_income(profile, retire_age, pension=0.0)
    dividends = profile.asset_invest * DIVIDEND_YIELD
    spending = expenses(profile, retire_age, include_passive_income=False)

    return CashFlowBreakdown(
        income=income,
        pension=pension,
        dividends=dividends,
        expenses=spending,
        net_cash_flow=income + pension + dividends - spending,
    )
