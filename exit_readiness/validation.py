"""Input validation for household profiles."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any

from exit_readiness.calculators import MAX_AGE
from exit_readiness.profile import Profile


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Result of validation containing any errors found."""

    errors: list[FieldError] = field(default_factory=list)

    def add_error(self, field_name: str, message: str) -> None:
        """Add a validation error."""
        self.errors.append(FieldError(field_name, message))

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)

    def is_valid(self) -> bool:
        """Return True if no validation errors."""
        return len(self.errors) == 0

    def error_messages(self) -> list[str]:
        """Return formatted error messages."""
        return [str(error) for error in self.errors]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_whole(value: Any) -> bool:
    # Ages and loan terms feed range()
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _check_range(
    result: ValidationResult,
    field_name: str,
    value: Any,
    low: float,
    high: float,
) -> None:
    if not _is_number(value) or not math.isfinite(value) or value < low or value > high:
        result.add_error(field_name, f"Must be between {low:g} and {high:g}")


def _check_whole_range(
    result: ValidationResult,
    field_name: str,
    value: Any,
    low: int,
    high: int,
) -> bool:
    if not _is_whole(value) or value < low or value > high:
        result.add_error(field_name, f"Must be an integer between {low} and {high}")
        return False
    return True


def validate_ages(profile: Profile) -> ValidationResult:
    """Validate age-related inputs."""
    result = ValidationResult()

    current = profile.current_age
    if not _check_whole_range(result, "current_age", current, 0, MAX_AGE - 1):
        # Later ages cannot be compared with an unusable current age
        current = 0

    _check_whole_range(result, "target_retire_age", profile.target_retire_age, current, MAX_AGE)

    if profile.partner_retire_age is not None:
        _check_whole_range(result, "partner_retire_age", profile.partner_retire_age, current, MAX_AGE)

    if not _is_whole(profile.post_retire_income_end_age) or profile.post_retire_income_end_age < 0:
        result.add_error("post_retire_income_end_age", "Must be a non-negative integer")

    return result


def validate_amounts(profile: Profile) -> ValidationResult:
    """Validate incomes, costs and balances that cannot be negative."""
    result = ValidationResult()

    non_negative = [
        "gross_income",
        "rsu_annual",
        "partner_gross_income",
        "partner_rsu_annual",
        "post_retire_income",
        "living_cost_annual",
        "housing_cost_annual",
        "home_market_value",
        "mortgage_principal",
        "mortgage_monthly_payment",
        "asset_cash",
        "asset_invest",
        "asset_dc",
        "dc_contribution_annual",
        "retire_passive_income",
    ]
    for field_name in non_negative:
        value = getattr(profile, field_name)
        if not _is_number(value) or not math.isfinite(value):
            result.add_error(field_name, "Must be a finite number")
        elif value < 0:
            result.add_error(field_name, "Cannot be negative")

    if not _is_number(profile.side_income_net) or not math.isfinite(profile.side_income_net):
        result.add_error("side_income_net", "Must be a finite number")

    years = profile.mortgage_years_remaining
    if not _is_whole(years):
        result.add_error("mortgage_years_remaining", "Must be a whole number of years")
    elif years < 0:
        result.add_error("mortgage_years_remaining", "Cannot be negative")

    return result


def validate_assumptions(profile: Profile) -> ValidationResult:
    """Validate return, inflation, volatility, tax and spending assumptions."""
    result = ValidationResult()

    _check_range(result, "expected_return", profile.expected_return, -50, 100)
    _check_range(result, "inflation_rate", profile.inflation_rate, -10, 30)
    if profile.rent_inflation_rate is not None:
        _check_range(result, "rent_inflation_rate", profile.rent_inflation_rate, -10, 30)
    _check_range(result, "volatility", profile.volatility, 0, 1)
    _check_range(result, "effective_tax_rate", profile.effective_tax_rate, 0, 100)
    _check_range(result, "retire_spending_multiplier", profile.retire_spending_multiplier, 0, 2)
    _check_range(result, "mortgage_interest_rate", profile.mortgage_interest_rate, 0, 30)

    return result


def validate_events(profile: Profile) -> ValidationResult:
    """Events must not start before the current age."""
    result = ValidationResult()
    if not _is_whole(profile.current_age):
        return result

    for index, event in enumerate(profile.life_events):
        if event.age < profile.current_age:
            label = event.name or event.id or event.event_type.value
            result.add_error(
                f"life_events[{index}]",
                f"{label} starts at {event.age}, before current age {profile.current_age}",
            )

    return result


def validate_all(profile: Profile) -> ValidationResult:
    """Run all validations and combine results."""
    combined = ValidationResult()

    validations = [
        validate_ages(profile),
        validate_amounts(profile),
        validate_assumptions(profile),
        validate_events(profile),
    ]

    for result in validations:
        combined.extend(result)

    return combined


def validate_profile(profile: Profile) -> list[FieldError]:
    """Collect every problem with a profile; never raises."""
    return validate_all(profile).errors
