"""Statutory deduction calculation: PAYE, NIS, Education Tax and HEART levy."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from jm_payroll.calculators.rate_table import StatutoryRateTable
from jm_payroll.calculators.types import (
    ZERO,
    StatutoryDeductions,
    TaxBracket,
    round_money,
)
from jm_payroll.errors import ValidationError

MONTHS_PER_YEAR = 12


def annualize(amount: Decimal, periods_per_year: int = MONTHS_PER_YEAR) -> Decimal:
    """Scale a per-period amount to a year."""
    return amount * periods_per_year


def deannualize(amount: Decimal, periods_per_year: int = MONTHS_PER_YEAR) -> Decimal:
    """Scale an annual amount back to one period."""
    return amount / periods_per_year


def progressive_annual_tax(annual_gross: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Calculate annual tax by walking ordered brackets.

    Each bracket taxes the portion of income in [lower, next_lower); the top
    bracket is open-ended. Income exactly on a boundary stays in the lower
    bracket. The result is unrounded.
    """
    if annual_gross <= 0:
        return ZERO

    total_tax = ZERO
    for i, bracket in enumerate(brackets):
        if annual_gross <= bracket.lower_annual_bound:
            break

        if i + 1 < len(brackets):
            top = min(annual_gross, brackets[i + 1].lower_annual_bound)
        else:
            top = annual_gross

        total_tax += (top - bracket.lower_annual_bound) * bracket.rate

    return total_tax


def two_bracket_closed_form(
    annual_gross: Decimal,
    threshold: Decimal,
    second_boundary: Decimal,
    rate1: Decimal,
    rate2: Decimal,
) -> Decimal:
    """Reference closed form for a zero band plus two taxed bands."""
    if annual_gross <= threshold:
        return ZERO
    if annual_gross <= second_boundary:
        return (annual_gross - threshold) * rate1
    return (second_boundary - threshold) * rate1 + (annual_gross - second_boundary) * rate2


class StatutoryDeductionCalculator:
    """Calculates statutory deductions from period gross earnings.

    Pure and deterministic: identical gross and rate table give identical
    results. Income tax brackets are annual, so gross is annualized, taxed,
    then brought back to the period. The contribution cap and the flat
    levies apply to the period gross directly.

    Every output is rounded half-up to cents once, at the end of its own
    computation.
    """

    def __init__(self, periods_per_year: int = MONTHS_PER_YEAR):
        self.periods_per_year = periods_per_year

    def calculate_deductions(
        self, gross_earnings: Decimal, rate_table: StatutoryRateTable
    ) -> StatutoryDeductions:
        """Calculate all employee statutory deductions for one period."""
        rate_table.validate()
        self._check_gross(gross_earnings)

        return StatutoryDeductions(
            income_tax=self.income_tax(gross_earnings, rate_table),
            contribution=self.contribution(gross_earnings, rate_table),
            education_levy=self._flat_levy(gross_earnings, rate_table.education_levy_rate),
            training_levy=self._flat_levy(gross_earnings, rate_table.training_levy_rate),
        )

    def income_tax(self, gross_earnings: Decimal, rate_table: StatutoryRateTable) -> Decimal:
        """Period income tax via annualize, bracket walk, de-annualize."""
        self._check_gross(gross_earnings)
        annual_gross = annualize(gross_earnings, self.periods_per_year)
        if annual_gross <= rate_table.threshold:
            return round_money(ZERO)

        annual_tax = progressive_annual_tax(annual_gross, rate_table.brackets)
        return round_money(deannualize(annual_tax, self.periods_per_year))

    def contribution(self, gross_earnings: Decimal, rate_table: StatutoryRateTable) -> Decimal:
        """Employee contribution, capped per period."""
        self._check_gross(gross_earnings)
        return round_money(
            min(gross_earnings * rate_table.contribution_rate, rate_table.contribution_monthly_cap)
        )

    def employer_contribution(
        self, gross_earnings: Decimal, rate_table: StatutoryRateTable
    ) -> Decimal:
        """Employer share of the contribution (liability, not withheld)."""
        self._check_gross(gross_earnings)
        return round_money(
            min(
                gross_earnings * rate_table.employer_contribution_rate,
                rate_table.contribution_monthly_cap,
            )
        )

    def _flat_levy(self, gross_earnings: Decimal, rate: Decimal) -> Decimal:
        return round_money(gross_earnings * rate)

    @staticmethod
    def _check_gross(gross_earnings: Decimal) -> None:
        if not gross_earnings.is_finite():
            raise ValidationError("gross_earnings", gross_earnings, "must be a finite amount")
        if gross_earnings < 0:
            raise ValidationError("gross_earnings", gross_earnings, "must be non-negative")


def calculate_deductions(
    gross_earnings: Decimal, rate_table: StatutoryRateTable
) -> StatutoryDeductions:
    """Monthly statutory deductions for a gross amount."""
    return StatutoryDeductionCalculator().calculate_deductions(gross_earnings, rate_table)
