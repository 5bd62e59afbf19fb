"""Tests for the household profile."""

import pytest

from exit_readiness.events import AssetGain, HousingPurchase
from exit_readiness.mortgage import PurchaseDetails
from exit_readiness.profile import HomeStatus, HouseholdMode, Profile, create_default_profile


class TestDefaultProfile:
    """Tests for the default profile."""

    def test_fresh_instance(self):
        """Each call returns an equal but distinct profile."""
        a = create_default_profile()
        b = create_default_profile()
        assert a == b
        assert a is not b

    def test_default_values(self, default_profile):
        """Key defaults."""
        assert default_profile.current_age == 35
        assert default_profile.target_retire_age == 55
        assert default_profile.mode == HouseholdMode.SOLO
        assert default_profile.home_status == HomeStatus.RENTER
        assert default_profile.total_assets == 2_800
        assert default_profile.life_events == ()


class TestProfileProperties:
    """Tests for derived properties."""

    def test_partner_stop_age_defaults_to_target(self, couple_profile):
        """Without a partner retirement age the partner stops with the earner."""
        assert couple_profile.partner_stop_age == 50
        assert couple_profile.replace(partner_retire_age=55).partner_stop_age == 55

    def test_rent_inflation_falls_back(self, default_profile):
        """Missing rent inflation uses general inflation."""
        assert default_profile.effective_rent_inflation == 0.5
        assert default_profile.replace(rent_inflation_rate=None).effective_rent_inflation == 2.0

    def test_enums_coerced(self):
        """Plain strings become enum members."""
        profile = Profile(current_age=30, target_retire_age=60, mode="couple", home_status="owner")
        assert profile.mode == HouseholdMode.COUPLE
        assert profile.home_status == HomeStatus.OWNER
        assert profile.home_status.pays_mortgage


class TestProfileCopies:
    """Tests for immutable updates."""

    def test_replace_leaves_original(self, default_profile):
        """replace returns a new profile."""
        older = default_profile.replace(current_age=40)
        assert older.current_age == 40
        assert default_profile.current_age == 35

    def test_with_event(self, default_profile):
        """with_event appends to the events."""
        event = AssetGain(age=45, amount=1_000)
        updated = default_profile.with_event(event)
        assert updated.life_events == (event,)
        assert default_profile.life_events == ()

    def test_frozen(self, default_profile):
        """Profiles are immutable."""
        with pytest.raises(AttributeError):
            default_profile.current_age = 40


class TestProfileDict:
    """Tests for plain-data conversion."""

    def test_from_dict_ignores_unknown_keys(self):
        """Unknown keys are dropped."""
        profile = Profile.from_dict({"current_age": 30, "target_retire_age": 60, "favourite_colour": "blue"})
        assert profile.current_age == 30

    def test_from_dict_parses_events(self):
        """Event dictionaries become event variants."""
        profile = Profile.from_dict(
            {
                "current_age": 30,
                "target_retire_age": 60,
                "life_events": [{"type": "asset_gain", "age": 50, "amount": 500}],
            }
        )
        assert profile.life_events == (AssetGain(age=50, amount=500.0),)

    def test_round_trip(self, couple_profile):
        """to_dict output rebuilds an equal profile."""
        details = PurchaseDetails(property_price=4_000, down_payment=800)
        profile = couple_profile.with_event(HousingPurchase(age=40, amount=0, purchase=details))
        data = profile.to_dict()
        assert data["mode"] == "couple"
        assert Profile.from_dict(data) == profile
