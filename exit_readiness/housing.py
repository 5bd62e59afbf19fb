"""Rent vs buy vs relocate comparison under common random numbers.

Every scenario is simulated with the same base seed, so run i of each
scenario sees the same sequence of market returns. Differences between
scenarios therefore come only from their cash flows.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from exit_readiness.calculators import housing_cost
from exit_readiness.events import AssetPurchase
from exit_readiness.exceptions import (
    ExitReadinessError,
    ProfileValidationError,
    SimulationError,
    ValidationError,
)
from exit_readiness.mortgage import PurchaseDetails, compute_yearly_housing_costs
from exit_readiness.profile import HomeStatus, Profile
from exit_readiness.results import SimulationResult
from exit_readiness.safe_age import find_safe_retirement_age
from exit_readiness.simulator import HOUSING_CONFIG, SimulationConfig, simulate_profile
from exit_readiness.validation import validate_profile
from utils.helpers import round_half_up

logger = logging.getLogger(__name__)

COMPARISON_YEARS = 40
REFERENCE_AGE = 60


class HousingScenarioType(str, Enum):
    RENT_BASELINE = "RENT_BASELINE"
    BUY_NOW = "BUY_NOW"
    BUY_LATER = "BUY_LATER"
    RELOCATE = "RELOCATE"


@dataclass(frozen=True)
class BuyParams(PurchaseDetails):
    """Purchase terms plus how many years from now the purchase happens."""

    buy_after_years: int = 0


@dataclass(frozen=True)
class RelocateParams:
    """
    Sale of the current home and purchase of a new one.

    Attributes:
        current_property_value: Expected sale price of the current home
        current_mortgage_remaining: Loan balance paid off at sale
        new_property: Terms of the new purchase
        selling_cost_rate: Selling costs as a percentage of the sale price
        relocate_after_years: Years from now until the move
    """

    current_property_value: float
    current_mortgage_remaining: float
    new_property: PurchaseDetails
    selling_cost_rate: float = 3.0
    relocate_after_years: int = 0

    @property
    def selling_costs(self) -> float:
        return self.current_property_value * self.selling_cost_rate / 100

    @property
    def sale_proceeds(self) -> float:
        """Cash from the sale after paying off the loan and selling costs."""
        return self.current_property_value - self.current_mortgage_remaining - self.selling_costs

    @property
    def net_transaction_cash(self) -> float:
        """Net cash to the household: positive when downsizing."""
        return self.sale_proceeds - self.new_property.upfront_outflow


@dataclass(frozen=True)
class HousingScenarioResult:
    """
    Outcome of one housing scenario.

    Attributes:
        type: Which scenario this is
        profile: Profile the scenario was simulated with
        simulation: Paths, metrics and score
        housing_costs: Housing cost per year from the current age
        safe_fire_age: Youngest retirement age with at least 90% survival
        monthly_payment: Monthly housing payment at the start of the scenario's
            housing arrangement
        total_cost_40_years: Upfront cash plus housing costs over 40 years
        assets_at_60: Median assets at age 60
    """

    type: HousingScenarioType
    profile: Profile
    simulation: SimulationResult
    housing_costs: tuple[float, ...]
    safe_fire_age: int | None
    monthly_payment: float
    total_cost_40_years: float
    assets_at_60: float


def apply_purchase_outflow(profile: Profile, outflow: float) -> Profile:
    """
    Pay `outflow` from cash first, then from invested assets.

    Any shortfall beyond both is left as negative cash.
    """
    remaining = outflow
    cash = profile.asset_cash
    invest = profile.asset_invest

    paid = min(cash, remaining)
    cash -= paid
    remaining -= paid

    if remaining > 0:
        paid = min(invest, remaining)
        invest -= paid
        remaining -= paid

    if remaining > 0:
        cash = -remaining

    return profile.replace(asset_cash=cash, asset_invest=invest)


def apply_transaction_cash(profile: Profile, net_cash: float) -> Profile:
    """Add a net receipt to cash, or pay a net cost with apply_purchase_outflow."""
    if net_cash >= 0:
        return profile.replace(asset_cash=profile.asset_cash + net_cash)
    return apply_purchase_outflow(profile, -net_cash)


def horizon_years(profile: Profile, config: SimulationConfig = HOUSING_CONFIG) -> int:
    return max(0, config.max_age - profile.current_age + 1)


def rent_schedule(profile: Profile, years: int) -> list[float]:
    """Current rent inflated at the rent inflation rate for `years` years."""
    growth = 1 + profile.effective_rent_inflation / 100
    return [profile.housing_cost_annual * growth**year for year in range(years)]


def current_housing_schedule(profile: Profile, years: int) -> list[float]:
    """The profile's own housing costs (rent or existing mortgage) per year."""
    return [housing_cost(profile, profile.current_age + year) for year in range(years)]


def _with_property(profile: Profile, details: PurchaseDetails, status: HomeStatus) -> Profile:
    first_year = compute_yearly_housing_costs(details, 1)
    return profile.replace(
        home_status=status,
        home_market_value=details.property_price,
        mortgage_principal=details.loan_principal,
        mortgage_interest_rate=details.interest_rate,
        mortgage_years_remaining=details.mortgage_years,
        mortgage_monthly_payment=details.monthly_payment,
        housing_cost_annual=first_year[0] if first_year else 0.0,
    )


def _assets_at_reference_age(simulation: SimulationResult, profile: Profile) -> float:
    assets = simulation.paths.assets_at(max(REFERENCE_AGE, profile.current_age))
    return assets if assets is not None else 0.0


def _run_scenario(
    scenario_type: HousingScenarioType,
    profile: Profile,
    housing_costs: list[float],
    config: SimulationConfig,
    monthly_payment: float,
    total_cost_40_years: float,
) -> HousingScenarioResult:
    simulation = simulate_profile(profile, config, housing_costs=housing_costs)
    safe_age = find_safe_retirement_age(profile, config, housing_costs)

    logger.info(
        f"{scenario_type.value}: score {simulation.score.overall}, "
        f"survival {simulation.metrics.survival_rate:.1f}%, safe age {safe_age}"
    )
    return HousingScenarioResult(
        type=scenario_type,
        profile=profile,
        simulation=simulation,
        housing_costs=tuple(housing_costs),
        safe_fire_age=safe_age,
        monthly_payment=monthly_payment,
        total_cost_40_years=total_cost_40_years,
        assets_at_60=_assets_at_reference_age(simulation, profile),
    )


def run_rent_baseline(
    profile: Profile,
    config: SimulationConfig = HOUSING_CONFIG,
) -> HousingScenarioResult:
    """The household's current arrangement, unchanged."""
    costs_40 = current_housing_schedule(profile, COMPARISON_YEARS)
    return _run_scenario(
        HousingScenarioType.RENT_BASELINE,
        profile,
        current_housing_schedule(profile, horizon_years(profile, config)),
        config,
        monthly_payment=profile.housing_cost_annual / 12,
        total_cost_40_years=float(round_half_up(sum(costs_40))),
    )


def run_buy_scenario(
    profile: Profile,
    params: BuyParams,
    config: SimulationConfig = HOUSING_CONFIG,
) -> HousingScenarioResult:
    """
    Buy a home now or after `params.buy_after_years` years.

    Buying now pays the upfront outflow from current balances. Buying
    later keeps renting until the purchase year, when the outflow lands
    as a one-time expense and the property's costs take over.
    """
    if params.buy_after_years < 0:
        raise ValidationError("buy_after_years", "Cannot be negative")

    years = horizon_years(profile, config)
    if params.buy_after_years >= years:
        raise ValidationError(
            "buy_after_years",
            f"Purchase must happen within the {years}-year projection",
        )
    purchase_costs = compute_yearly_housing_costs(params, years)
    delay = params.buy_after_years

    if delay == 0:
        scenario_type = HousingScenarioType.BUY_NOW
        scenario = apply_purchase_outflow(
            _with_property(profile, params, HomeStatus.OWNER),
            params.upfront_outflow,
        )
        schedule = purchase_costs
    else:
        scenario_type = HousingScenarioType.BUY_LATER
        scenario = _with_property(profile, params, HomeStatus.PLANNING).replace(
            housing_cost_annual=profile.housing_cost_annual,
        )
        scenario = scenario.with_event(
            AssetPurchase(
                age=profile.current_age + delay,
                amount=params.upfront_outflow,
                name="Home purchase",
            )
        )
        schedule = rent_schedule(profile, delay) + purchase_costs[: years - delay]

    total_40 = params.upfront_outflow + sum(compute_yearly_housing_costs(params, COMPARISON_YEARS))
    return _run_scenario(
        scenario_type,
        scenario,
        schedule,
        config,
        monthly_payment=params.monthly_payment + params.owner_annual_cost / 12,
        total_cost_40_years=total_40,
    )


def run_relocate_scenario(
    profile: Profile,
    params: RelocateParams,
    config: SimulationConfig = HOUSING_CONFIG,
) -> HousingScenarioResult:
    """
    Sell the current home and buy a new one, now or after a delay.

    Until a delayed move, the household keeps paying its current housing
    cost; the net transaction cash lands as a one-time event at the move.
    """
    if params.relocate_after_years < 0:
        raise ValidationError("relocate_after_years", "Cannot be negative")

    new_property = params.new_property
    years = horizon_years(profile, config)
    if params.relocate_after_years >= years:
        raise ValidationError(
            "relocate_after_years",
            f"Move must happen within the {years}-year projection",
        )
    new_costs = compute_yearly_housing_costs(new_property, years)
    delay = params.relocate_after_years
    net_cash = params.net_transaction_cash

    if delay == 0:
        scenario = apply_transaction_cash(
            _with_property(profile, new_property, HomeStatus.OWNER),
            net_cash,
        )
        schedule = new_costs
    else:
        scenario = profile.replace(home_status=HomeStatus.RELOCATING).with_event(
            AssetPurchase(
                age=profile.current_age + delay,
                amount=-net_cash,
                name="Relocation (sale and purchase)",
            )
        )
        schedule = current_housing_schedule(profile, delay) + new_costs[: years - delay]

    total_40 = new_property.upfront_outflow - params.sale_proceeds + sum(
        compute_yearly_housing_costs(new_property, COMPARISON_YEARS)
    )
    return _run_scenario(
        HousingScenarioType.RELOCATE,
        scenario,
        schedule,
        config,
        monthly_payment=new_property.monthly_payment + new_property.owner_annual_cost / 12,
        total_cost_40_years=total_40,
    )


def run_housing_scenarios(
    profile: Profile,
    buy_params: BuyParams | None = None,
    relocate_params: RelocateParams | None = None,
    config: SimulationConfig = HOUSING_CONFIG,
    max_workers: int | None = None,
) -> list[HousingScenarioResult]:
    """
    Compare the rent baseline with a purchase and/or a relocation.

    Args:
        profile: Household profile
        buy_params: Purchase to evaluate, if any
        relocate_params: Relocation to evaluate, if any
        config: Simulation settings shared by every scenario
        max_workers: Run scenarios on a thread pool of this size; sequential
            when None or 1

    Returns:
        The rent baseline first, then buy, then relocate, as requested

    Raises:
        ProfileValidationError: if the profile has invalid fields
        ValidationError: if the scenario parameters are invalid
        SimulationError: if a scenario fails unexpectedly
    """
    errors = validate_profile(profile)
    if errors:
        raise ProfileValidationError(errors)

    tasks: list[Callable[[], HousingScenarioResult]] = [lambda: run_rent_baseline(profile, config)]
    if buy_params is not None:
        tasks.append(lambda: run_buy_scenario(profile, buy_params, config))
    if relocate_params is not None:
        tasks.append(lambda: run_relocate_scenario(profile, relocate_params, config))

    logger.info(f"Running {len(tasks)} housing scenarios with {config.n_simulations} paths each")

    try:
        if max_workers is None or max_workers <= 1:
            return [task() for task in tasks]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(task) for task in tasks]
            return [future.result() for future in futures]
    except ExitReadinessError:
        raise
    except Exception as e:
        logger.error(f"Housing comparison failed: {e}")
        raise SimulationError(f"Housing comparison failed: {e}") from e
