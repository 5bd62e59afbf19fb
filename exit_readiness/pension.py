"""Public pension estimate from a career-average salary."""

from __future__ import annotations

from typing import Iterable

from exit_readiness.events import IncomeEvent, LifeEvent, Target
from exit_readiness.profile import Profile
from exit_readiness.tax_config import DEFAULT_PENSION_RULES, PensionRules
from utils.helpers import round_half_up


def career_average_gross(
    base_gross: float,
    events: Iterable[LifeEvent],
    current_age: int,
    retire_age: int,
    target: Target,
    rules: PensionRules = DEFAULT_PENSION_RULES,
) -> float:
    """
    Average annual gross salary over the contribution career.

    Years before `current_age` are assumed to have paid `base_gross`; income
    events for `target` are folded in from `current_age` onward. Each year
    is floored at zero before averaging.
    """
    end_age = min(retire_age, rules.contribution_end_age)
    total_years = max(0, end_age - rules.career_start_age)
    if total_years == 0:
        return base_gross

    income_events = [e for e in events if isinstance(e, IncomeEvent) and e.target == target]

    total = 0.0
    for age in range(rules.career_start_age, end_age):
        yearly = base_gross
        if age >= current_age:
            yearly += sum(e.signed_amount for e in income_events if e.is_active(age))
        total += max(0.0, yearly)

    return total / total_years


def person_pension(
    average_gross: float,
    retire_age: int,
    rules: PensionRules = DEFAULT_PENSION_RULES,
) -> float:
    """Annual pension (basic plus earnings-related) for one person, rounded."""
    if average_gross <= 0:
        return 0.0

    years = rules.contribution_years(retire_age)
    basic = rules.full_basic_pension * years / rules.max_contribution_years
    monthly_remuneration = min(average_gross / 12, rules.monthly_remuneration_cap)
    proportional = monthly_remuneration * rules.proportional_rate * years * 12

    return float(round_half_up(basic + proportional))


def annual_pension(profile: Profile, rules: PensionRules = DEFAULT_PENSION_RULES) -> float:
    """Household pension per year once payments start."""
    self_avg = career_average_gross(
        profile.gross_income + profile.rsu_annual,
        profile.life_events,
        profile.current_age,
        profile.target_retire_age,
        Target.SELF,
        rules,
    )
    total = person_pension(self_avg, profile.target_retire_age, rules)

    if profile.is_couple:
        partner_avg = career_average_gross(
            profile.partner_gross_income + profile.partner_rsu_annual,
            profile.life_events,
            profile.current_age,
            profile.partner_stop_age,
            Target.PARTNER,
            rules,
        )
        total += person_pension(partner_avg, profile.partner_stop_age, rules)

    return total
