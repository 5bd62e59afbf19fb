"""Tax tables, pension rules and statutory constants for the income model.

All amounts are in 10,000-yen units ("man-yen"), matching the default
profile. The tables are a simplified approximation of the 2024 Japanese
salary-earner rules and are not meant to be tax-law accurate.
"""

from __future__ import annotations

from dataclasses import dataclass


# Employment income deduction, piecewise linear in gross salary.
# Format: (upper_bound, rate, offset) -> deduction = gross * rate + offset
EMPLOYMENT_DEDUCTION_TABLE: list[tuple[float, float, float]] = [
    (162.5, 0.0, 55.0),
    (180.0, 0.4, -10.0),
    (360.0, 0.3, 8.0),
    (660.0, 0.2, 44.0),
    (850.0, 0.1, 110.0),
    (float("inf"), 0.0, 195.0),  # Cap
]

# Basic deduction shrinks for high earners.
# Format: (upper bound on total income, deduction)
BASIC_DEDUCTION_TIERS: list[tuple[float, float]] = [
    (2_400.0, 48.0),
    (2_450.0, 32.0),
    (2_500.0, 16.0),
    (float("inf"), 0.0),
]

# National income tax brackets.
# Format: (upper_bound, marginal_rate)
INCOME_TAX_BRACKETS: list[tuple[float, float]] = [
    (195.0, 0.05),
    (330.0, 0.10),
    (695.0, 0.20),
    (900.0, 0.23),
    (1_800.0, 0.33),
    (4_000.0, 0.40),
    (float("inf"), 0.45),
]


@dataclass(frozen=True)
class SocialInsuranceRates:
    """
    Employee share of social insurance premiums.

    Attributes:
        pension_rate: Employees' pension insurance rate
        pension_income_cap: Gross salary above which pension premiums stop growing
        health_rate: Health insurance rate
        health_income_cap: Gross salary above which health premiums stop growing
        employment_rate: Employment insurance rate (uncapped)
    """

    pension_rate: float = 0.0915
    pension_income_cap: float = 780.0
    health_rate: float = 0.05
    health_income_cap: float = 1_390.0
    employment_rate: float = 0.006

    def premiums(self, gross_income: float) -> float:
        """Total annual premiums for a given gross salary."""
        pension = min(gross_income, self.pension_income_cap) * self.pension_rate
        health = min(gross_income, self.health_income_cap) * self.health_rate
        employment = gross_income * self.employment_rate
        return pension + health + employment


SOCIAL_INSURANCE = SocialInsuranceRates()

# Special reconstruction surtax applied on top of national income tax
RECONSTRUCTION_SURTAX_RATE = 0.021

# Flat local (resident) tax on taxable income
RESIDENT_TAX_RATE = 0.10

# Flat rate applied to post-retirement business and part-time income
POST_RETIRE_INCOME_TAX_RATE = 0.20

# Dividend yield assumed on invested assets for the cash-flow breakdown
DIVIDEND_YIELD = 0.03


@dataclass(frozen=True)
class PensionRules:
    """
    Public pension approximation.

    Attributes:
        start_age: Age at which pension payments begin
        career_start_age: First working year used for the career-average salary
        contribution_start_age: Age at which pension contributions start
        contribution_end_age: Age after which no further contributions accrue
        max_contribution_years: Cap on contribution years
        full_basic_pension: Annual basic pension for a full contribution record
        monthly_remuneration_cap: Cap on the standard monthly remuneration
        proportional_rate: Earnings-related accrual per contribution month
    """

    start_age: int = 65
    career_start_age: int = 22
    contribution_start_age: int = 20
    contribution_end_age: int = 60
    max_contribution_years: int = 40
    full_basic_pension: float = 80.0
    monthly_remuneration_cap: float = 65.0
    proportional_rate: float = 5.481 / 1000

    def contribution_years(self, retire_age: int) -> int:
        """Years of contributions for someone who stops working at retire_age."""
        years = max(0, min(retire_age, self.contribution_end_age) - self.contribution_start_age)
        return min(years, self.max_contribution_years)


DEFAULT_PENSION_RULES = PensionRules()


def employment_deduction(gross_income: float) -> float:
    """Employment income deduction for a gross salary."""
    for upper_bound, rate, offset in EMPLOYMENT_DEDUCTION_TABLE:
        if gross_income <= upper_bound:
            return gross_income * rate + offset
    return EMPLOYMENT_DEDUCTION_TABLE[-1][2]


def basic_deduction(total_income: float) -> float:
    """Basic deduction for a given total income (gross minus employment deduction)."""
    for upper_bound, deduction in BASIC_DEDUCTION_TIERS:
        if total_income <= upper_bound:
            return deduction
    return 0.0
