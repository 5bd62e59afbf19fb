"""Tests for the public pension estimate."""

import pytest

from exit_readiness.events import IncomeDecrease, Target
from exit_readiness.pension import annual_pension, career_average_gross, person_pension
from exit_readiness.profile import HouseholdMode
from exit_readiness.tax_config import DEFAULT_PENSION_RULES


class TestContributionYears:
    """Tests for contribution record length."""

    def test_full_record(self):
        """Working to 60 gives 40 years."""
        assert DEFAULT_PENSION_RULES.contribution_years(60) == 40
        assert DEFAULT_PENSION_RULES.contribution_years(70) == 40

    def test_early_stop(self):
        """Stopping at 50 gives 30 years."""
        assert DEFAULT_PENSION_RULES.contribution_years(50) == 30


class TestCareerAverage:
    """Tests for the career-average salary."""

    def test_constant_salary(self):
        """No events means the base salary."""
        assert career_average_gross(1_000, (), 35, 60, Target.SELF) == pytest.approx(1_000)

    def test_future_decrease(self):
        """A future pay cut lowers the average for the remaining years."""
        events = (IncomeDecrease(age=40, amount=500),)
        average = career_average_gross(1_000, events, 35, 60, Target.SELF)
        assert average == pytest.approx((18 * 1_000 + 20 * 500) / 38)

    def test_other_target_ignored(self):
        """Partner events do not change the earner's average."""
        events = (IncomeDecrease(age=40, amount=500, target=Target.PARTNER),)
        assert career_average_gross(1_000, events, 35, 60, Target.SELF) == pytest.approx(1_000)

    def test_no_career_years(self):
        """Retiring before the career start returns the base salary."""
        assert career_average_gross(800, (), 20, 21, Target.SELF) == 800


class TestPersonPension:
    """Tests for one person's pension."""

    def test_no_salary(self):
        """No earnings, no pension."""
        assert person_pension(0, 60) == 0.0

    def test_full_record(self):
        """Basic plus earnings-related part, rounded."""
        assert person_pension(600, 60) == 212

    def test_remuneration_capped(self):
        """Monthly remuneration is capped."""
        assert person_pension(1_200, 60) == 251
        assert person_pension(2_400, 60) == 251

    def test_shorter_record(self):
        """Fewer years reduce both parts."""
        assert person_pension(600, 50) == 159


class TestHouseholdPension:
    """Tests for the household total."""

    def test_solo(self, default_profile):
        """Solo households get one pension."""
        expected = person_pension(1_200, 55)
        assert annual_pension(default_profile) == expected

    def test_couple_adds_partner(self, default_profile):
        """Couples add the partner's pension using the partner's stop age."""
        couple = default_profile.replace(
            mode=HouseholdMode.COUPLE,
            partner_gross_income=600,
            partner_retire_age=60,
        )
        assert annual_pension(couple) == person_pension(1_200, 55) + person_pension(600, 60)
