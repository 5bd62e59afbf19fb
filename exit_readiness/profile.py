"""Household profile: the immutable input to every simulation."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from exit_readiness.events import LifeEvent, event_from_dict


class HouseholdMode(str, Enum):
    SOLO = "solo"
    COUPLE = "couple"


class HomeStatus(str, Enum):
    """Housing situation at the start of the projection."""

    RENTER = "renter"
    OWNER = "owner"
    PLANNING = "planning"  # renting now, purchase scheduled
    RELOCATING = "relocating"  # owner, sale and new purchase scheduled

    @property
    def pays_mortgage(self) -> bool:
        return self in (HomeStatus.OWNER, HomeStatus.RELOCATING)


@dataclass(frozen=True)
class Profile:
    """
    Snapshot of a household's finances and assumptions.

    Percent-valued fields (returns, inflation, tax and mortgage rates) are
    stated in percent; `volatility` is a decimal standard deviation.
    """

    # Ages
    current_age: int
    target_retire_age: int
    partner_retire_age: int | None = None
    mode: HouseholdMode = HouseholdMode.SOLO

    # Income
    gross_income: float = 0.0
    rsu_annual: float = 0.0
    side_income_net: float = 0.0
    partner_gross_income: float = 0.0
    partner_rsu_annual: float = 0.0
    post_retire_income: float = 0.0
    post_retire_income_end_age: int = 75

    # Expenses
    living_cost_annual: float = 0.0
    housing_cost_annual: float = 0.0

    # Housing
    home_status: HomeStatus = HomeStatus.RENTER
    home_market_value: float = 0.0
    mortgage_principal: float = 0.0
    mortgage_interest_rate: float = 0.0
    mortgage_years_remaining: int = 0
    mortgage_monthly_payment: float = 0.0

    # Assets
    asset_cash: float = 0.0
    asset_invest: float = 0.0
    asset_dc: float = 0.0
    dc_contribution_annual: float = 0.0

    # Assumptions
    expected_return: float = 5.0
    inflation_rate: float = 2.0
    rent_inflation_rate: float | None = None
    volatility: float = 0.15

    # Tax
    effective_tax_rate: float = 20.0
    use_auto_tax_rate: bool = False

    # Retirement
    retire_spending_multiplier: float = 1.0
    retire_passive_income: float = 0.0

    life_events: tuple[LifeEvent, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Freeze list inputs and coerce plain strings to enums
        object.__setattr__(self, "life_events", tuple(self.life_events))
        object.__setattr__(self, "mode", HouseholdMode(self.mode))
        object.__setattr__(self, "home_status", HomeStatus(self.home_status))

    @property
    def is_couple(self) -> bool:
        return self.mode == HouseholdMode.COUPLE

    @property
    def partner_stop_age(self) -> int:
        """Partner's stop-work age on the primary earner's age axis."""
        if self.partner_retire_age is None:
            return self.target_retire_age
        return self.partner_retire_age

    @property
    def total_assets(self) -> float:
        """Liquid starting balance: cash, invested and retirement account."""
        return self.asset_cash + self.asset_invest + self.asset_dc

    @property
    def effective_rent_inflation(self) -> float:
        if self.rent_inflation_rate is None:
            return self.inflation_rate
        return self.rent_inflation_rate

    def replace(self, **changes: Any) -> "Profile":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def with_event(self, event: LifeEvent) -> "Profile":
        """Return a copy with `event` appended to the life events."""
        return self.replace(life_events=self.life_events + (event,))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from a dictionary of field values; unknown keys are ignored."""
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        kwargs["life_events"] = tuple(
            event if isinstance(event, LifeEvent) else event_from_dict(event)
            for event in data.get("life_events", ())
        )
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form suitable for JSON."""
        data = {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if f.name != "life_events"
        }
        data["mode"] = self.mode.value
        data["home_status"] = self.home_status.value
        data["life_events"] = [event.to_dict() for event in self.life_events]
        return data


def create_default_profile() -> Profile:
    """Starting profile for a new single-earner household renting its home."""
    return Profile(
        current_age=35,
        target_retire_age=55,
        mode=HouseholdMode.SOLO,
        gross_income=1_200.0,
        rsu_annual=0.0,
        side_income_net=0.0,
        partner_gross_income=0.0,
        partner_rsu_annual=0.0,
        living_cost_annual=360.0,
        housing_cost_annual=180.0,
        home_status=HomeStatus.RENTER,
        asset_cash=500.0,
        asset_invest=2_000.0,
        asset_dc=300.0,
        dc_contribution_annual=66.0,
        expected_return=5.0,
        inflation_rate=2.0,
        rent_inflation_rate=0.5,
        volatility=0.15,
        effective_tax_rate=25.0,
        use_auto_tax_rate=True,
        retire_spending_multiplier=0.8,
        retire_passive_income=0.0,
        post_retire_income=0.0,
        post_retire_income_end_age=75,
    )
