"""Shared pytest fixtures for exit readiness tests."""

import pytest

from exit_readiness.profile import HomeStatus, HouseholdMode, Profile, create_default_profile
from exit_readiness.simulator import SimulationConfig


@pytest.fixture
def default_profile() -> Profile:
    """Single earner, 35, renting, default assumptions."""
    return create_default_profile()


@pytest.fixture
def flat_tax_profile(default_profile) -> Profile:
    """Default profile with a flat 20% tax for predictable incomes."""
    return default_profile.replace(use_auto_tax_rate=False, effective_tax_rate=20.0)


@pytest.fixture
def couple_profile() -> Profile:
    """Dual-income renting couple aiming to retire at 50."""
    return create_default_profile().replace(
        current_age=35,
        target_retire_age=50,
        mode=HouseholdMode.COUPLE,
        gross_income=1_600.0,
        partner_gross_income=800.0,
        housing_cost_annual=384.0,
        living_cost_annual=420.0,
        asset_cash=1_000.0,
        asset_invest=2_400.0,
        asset_dc=600.0,
    )


@pytest.fixture
def owner_profile() -> Profile:
    """Household paying off an existing mortgage."""
    return create_default_profile().replace(
        home_status=HomeStatus.OWNER,
        home_market_value=6_000.0,
        mortgage_principal=4_000.0,
        mortgage_interest_rate=0.7,
        mortgage_years_remaining=25,
        mortgage_monthly_payment=15.0,
        housing_cost_annual=220.0,
    )


@pytest.fixture
def high_rent_profile() -> Profile:
    """Renter whose rent eats most of a modest income."""
    return Profile(
        current_age=35,
        target_retire_age=60,
        gross_income=700.0,
        use_auto_tax_rate=False,
        effective_tax_rate=20.0,
        living_cost_annual=200.0,
        housing_cost_annual=480.0,
        rent_inflation_rate=0.5,
        asset_cash=1_000.0,
        asset_invest=1_000.0,
    )


@pytest.fixture
def small_config() -> SimulationConfig:
    """Fewer paths for fast tests."""
    return SimulationConfig(n_simulations=100)
