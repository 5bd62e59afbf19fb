"""Tax calculation logic for employment income."""

from __future__ import annotations

from dataclasses import dataclass

from exit_readiness.tax_config import (
    INCOME_TAX_BRACKETS,
    RECONSTRUCTION_SURTAX_RATE,
    RESIDENT_TAX_RATE,
    SOCIAL_INSURANCE,
    basic_deduction,
    employment_deduction,
)


@dataclass(frozen=True)
class TaxResult:
    """Breakdown of the taxes and premiums due on a gross salary."""

    gross_income: float
    taxable_income: float
    income_tax: float
    resident_tax: float
    social_insurance: float

    @property
    def total_tax(self) -> float:
        """Income tax, resident tax and social insurance combined."""
        return self.income_tax + self.resident_tax + self.social_insurance

    @property
    def effective_rate(self) -> float:
        """Effective rate as a percentage of gross income."""
        if self.gross_income <= 0:
            return 0.0
        return self.total_tax / self.gross_income * 100

    @property
    def net_income(self) -> float:
        """Take-home pay after all taxes and premiums."""
        return self.gross_income - self.total_tax


def calculate_bracket_tax(
    taxable_income: float,
    brackets: list[tuple[float, float]] = INCOME_TAX_BRACKETS,
) -> float:
    """
    Apply marginal tax brackets to a taxable income.

    Args:
        taxable_income: Income after deductions
        brackets: List of (upper_bound, rate) tuples in ascending order

    Returns:
        Tax due before any surtax
    """
    if taxable_income <= 0:
        return 0.0

    tax = 0.0
    prev_bound = 0.0

    for upper_bound, rate in brackets:
        if taxable_income <= prev_bound:
            break

        bracket_income = min(taxable_income, upper_bound) - prev_bound
        if bracket_income > 0:
            tax += bracket_income * rate

        prev_bound = upper_bound

    return tax


def calculate_salary_tax(gross_income: float) -> TaxResult:
    """
    Estimate taxes and social insurance on an annual gross salary.

    Steps: employment deduction, social insurance premiums (capped), basic
    deduction (tapered for high earners), progressive income tax with the
    reconstruction surtax, and a flat resident tax.
    """
    if gross_income <= 0:
        return TaxResult(
            gross_income=0.0,
            taxable_income=0.0,
            income_tax=0.0,
            resident_tax=0.0,
            social_insurance=0.0,
        )

    emp_deduction = employment_deduction(gross_income)
    social_insurance = SOCIAL_INSURANCE.premiums(gross_income)
    total_income = gross_income - emp_deduction
    taxable_income = max(
        0.0,
        gross_income - emp_deduction - basic_deduction(total_income) - social_insurance,
    )

    income_tax = calculate_bracket_tax(taxable_income) * (1 + RECONSTRUCTION_SURTAX_RATE)
    resident_tax = taxable_income * RESIDENT_TAX_RATE

    return TaxResult(
        gross_income=gross_income,
        taxable_income=taxable_income,
        income_tax=income_tax,
        resident_tax=resident_tax,
        social_insurance=social_insurance,
    )


def calculate_effective_tax_rate(gross_income: float) -> float:
    """Effective tax rate (%) on a gross salary; 0 for non-positive income."""
    return calculate_salary_tax(gross_income).effective_rate


def apply_tax(gross_income: float, use_auto_rate: bool, flat_rate: float) -> float:
    """
    Net income after tax for one earner.

    Args:
        gross_income: Annual gross income (clamped at zero)
        use_auto_rate: Use the progressive approximation instead of flat_rate
        flat_rate: Flat effective rate in percent

    Returns:
        Net annual income
    """
    gross = max(0.0, gross_income)
    rate = calculate_effective_tax_rate(gross) if use_auto_rate else flat_rate
    return gross * (1 - rate / 100)
