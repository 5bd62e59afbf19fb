"""Tests for the rent vs buy vs relocate comparison."""

import numpy as np
import pytest

from exit_readiness.events import AssetPurchase
from exit_readiness.exceptions import ProfileValidationError, ValidationError
from exit_readiness.housing import (
    BuyParams,
    HousingScenarioType,
    RelocateParams,
    apply_purchase_outflow,
    current_housing_schedule,
    rent_schedule,
    run_housing_scenarios,
)
from exit_readiness.mortgage import PurchaseDetails, compute_yearly_housing_costs
from exit_readiness.profile import HomeStatus
from exit_readiness.simulator import run_ensemble
from utils.helpers import round_half_up


@pytest.fixture
def buy_now() -> BuyParams:
    return BuyParams(
        property_price=3_000.0,
        down_payment=500.0,
        interest_rate=0.5,
        mortgage_years=35,
        owner_annual_cost=20.0,
    )


@pytest.fixture
def relocate() -> RelocateParams:
    """Sell a 6,000 home with 4,000 owed and buy a 5,000 one."""
    return RelocateParams(
        current_property_value=6_000.0,
        current_mortgage_remaining=4_000.0,
        new_property=PurchaseDetails(property_price=5_000.0, down_payment=1_000.0),
    )


class TestPurchaseOutflow:
    """Tests for paying the upfront outflow."""

    def test_paid_from_cash(self, default_profile):
        """Cash covers small outflows."""
        profile = apply_purchase_outflow(default_profile, 300)
        assert profile.asset_cash == 200
        assert profile.asset_invest == 2_000

    def test_spills_into_investments(self, default_profile):
        """Investments cover what cash cannot."""
        profile = apply_purchase_outflow(default_profile, 1_000)
        assert profile.asset_cash == 0
        assert profile.asset_invest == 1_500

    def test_shortfall_left_as_negative_cash(self, default_profile):
        """A shortfall beyond both is negative cash."""
        profile = apply_purchase_outflow(default_profile, 3_000)
        assert profile.asset_cash == -500
        assert profile.asset_invest == 0


class TestRelocateParams:
    """Tests for sale and purchase amounts."""

    def test_transaction_cash(self, relocate):
        """Sale proceeds net of loan and costs, minus the new outflow."""
        assert relocate.selling_costs == pytest.approx(180)
        assert relocate.sale_proceeds == pytest.approx(1_820)
        assert relocate.net_transaction_cash == pytest.approx(470)


class TestRentBaseline:
    """Tests for the baseline scenario."""

    def test_baseline_only(self, default_profile, small_config):
        """Without options only the baseline runs."""
        results = run_housing_scenarios(default_profile, config=small_config)
        assert [r.type for r in results] == [HousingScenarioType.RENT_BASELINE]

        baseline = results[0]
        assert baseline.profile == default_profile
        assert baseline.monthly_payment == pytest.approx(15)
        assert baseline.total_cost_40_years == round_half_up(sum(rent_schedule(default_profile, 40)))
        assert len(baseline.housing_costs) == 66
        assert baseline.assets_at_60 == baseline.simulation.paths.assets_at(60)


class TestBuyScenario:
    """Tests for buying a home."""

    def test_buy_now(self, default_profile, buy_now, small_config):
        """Buying now pays the outflow and switches to owner costs."""
        results = run_housing_scenarios(default_profile, buy_params=buy_now, config=small_config)
        assert [r.type for r in results] == [HousingScenarioType.RENT_BASELINE, HousingScenarioType.BUY_NOW]

        buy = results[1]
        assert buy.profile.home_status == HomeStatus.OWNER
        assert buy.profile.mortgage_principal == 2_500
        assert buy.profile.asset_cash == 0
        assert buy.profile.asset_invest == pytest.approx(1_790)
        assert list(buy.housing_costs) == pytest.approx(compute_yearly_housing_costs(buy_now, 66))
        assert buy.monthly_payment == pytest.approx(buy_now.monthly_payment + 20 / 12)
        assert buy.total_cost_40_years == pytest.approx(
            buy_now.upfront_outflow + sum(compute_yearly_housing_costs(buy_now, 40))
        )

    def test_buy_later(self, default_profile, small_config):
        """Buying later rents first, then pays the outflow in the purchase year."""
        params = BuyParams(
            property_price=3_000.0,
            down_payment=500.0,
            owner_annual_cost=20.0,
            buy_after_years=3,
        )
        results = run_housing_scenarios(default_profile, buy_params=params, config=small_config)
        buy = results[1]

        assert buy.type == HousingScenarioType.BUY_LATER
        assert buy.profile.home_status == HomeStatus.PLANNING
        assert buy.profile.asset_cash == default_profile.asset_cash
        assert buy.profile.life_events == (
            AssetPurchase(age=38, amount=params.upfront_outflow, name="Home purchase"),
        )
        assert list(buy.housing_costs[:3]) == pytest.approx(rent_schedule(default_profile, 3))
        assert buy.housing_costs[3] == pytest.approx(compute_yearly_housing_costs(params, 1)[0])

    def test_negative_delay_rejected(self, default_profile, small_config):
        """Negative delays are invalid."""
        params = BuyParams(property_price=3_000.0, down_payment=500.0, buy_after_years=-1)
        with pytest.raises(ValidationError):
            run_housing_scenarios(default_profile, buy_params=params, config=small_config)

    def test_purchase_beyond_horizon_rejected(self, default_profile, small_config):
        """A purchase that would land after age 100 never happens, so it is refused."""
        params = BuyParams(property_price=3_000.0, down_payment=500.0, buy_after_years=66)
        with pytest.raises(ValidationError) as excinfo:
            run_housing_scenarios(default_profile, buy_params=params, config=small_config)
        assert excinfo.value.field == "buy_after_years"

    def test_last_projection_year_accepted(self, default_profile, small_config):
        """Buying in the final projected year is still a purchase."""
        params = BuyParams(property_price=3_000.0, down_payment=500.0, buy_after_years=65)
        buy = run_housing_scenarios(default_profile, buy_params=params, config=small_config)[1]
        assert buy.type == HousingScenarioType.BUY_LATER
        assert buy.profile.life_events[-1].age == 100
        assert len(buy.housing_costs) == 66

    def test_buy_beats_expensive_rent(self, high_rent_profile, buy_now, small_config):
        """Owning is better than rent that eats most of the income."""
        rent, buy = run_housing_scenarios(high_rent_profile, buy_params=buy_now, config=small_config)
        assert buy.simulation.score.overall > rent.simulation.score.overall
        assert buy.simulation.metrics.survival_rate > rent.simulation.metrics.survival_rate


class TestRelocateScenario:
    """Tests for selling and buying."""

    def test_relocate_now(self, owner_profile, relocate, small_config):
        """Net sale proceeds land in cash immediately."""
        results = run_housing_scenarios(owner_profile, relocate_params=relocate, config=small_config)
        moved = results[1]

        assert moved.type == HousingScenarioType.RELOCATE
        assert moved.profile.home_status == HomeStatus.OWNER
        assert moved.profile.asset_cash == pytest.approx(owner_profile.asset_cash + 470)
        assert moved.profile.mortgage_principal == 4_000
        assert moved.total_cost_40_years == pytest.approx(
            1_350 - 1_820 + sum(compute_yearly_housing_costs(relocate.new_property, 40))
        )

    def test_relocate_later(self, owner_profile, relocate, small_config):
        """A delayed move keeps current costs until the move year."""
        params = RelocateParams(
            current_property_value=relocate.current_property_value,
            current_mortgage_remaining=relocate.current_mortgage_remaining,
            new_property=relocate.new_property,
            relocate_after_years=3,
        )
        moved = run_housing_scenarios(owner_profile, relocate_params=params, config=small_config)[1]

        assert moved.profile.home_status == HomeStatus.RELOCATING
        assert moved.profile.life_events[-1].lump_sum == pytest.approx(470)
        assert moved.profile.life_events[-1].age == 38
        assert list(moved.housing_costs[:3]) == pytest.approx(current_housing_schedule(owner_profile, 3))
        assert moved.housing_costs[3] == pytest.approx(
            compute_yearly_housing_costs(relocate.new_property, 1)[0]
        )

    def test_move_beyond_horizon_rejected(self, owner_profile, relocate, small_config):
        """A move after the last projected year is refused."""
        params = RelocateParams(
            current_property_value=relocate.current_property_value,
            current_mortgage_remaining=relocate.current_mortgage_remaining,
            new_property=relocate.new_property,
            relocate_after_years=80,
        )
        with pytest.raises(ValidationError) as excinfo:
            run_housing_scenarios(owner_profile, relocate_params=params, config=small_config)
        assert excinfo.value.field == "relocate_after_years"


class TestScenarioComparison:
    """Tests across scenarios."""

    def test_common_random_numbers(self, default_profile, buy_now, small_config):
        """Every scenario sees the same market returns."""
        rent, buy = run_housing_scenarios(default_profile, buy_params=buy_now, config=small_config)
        rent_returns = run_ensemble(rent.profile, small_config, list(rent.housing_costs)).returns
        buy_returns = run_ensemble(buy.profile, small_config, list(buy.housing_costs)).returns
        assert np.array_equal(rent_returns, buy_returns)

    def test_thread_pool_matches_sequential(self, owner_profile, buy_now, relocate, small_config):
        """Running scenarios in parallel gives the same results."""
        sequential = run_housing_scenarios(owner_profile, buy_now, relocate, small_config)
        parallel = run_housing_scenarios(owner_profile, buy_now, relocate, small_config, max_workers=3)
        assert parallel == sequential

    def test_invalid_profile(self, default_profile, small_config):
        """Invalid profiles are rejected before any scenario runs."""
        with pytest.raises(ProfileValidationError):
            run_housing_scenarios(default_profile.replace(asset_cash=-1), config=small_config)
