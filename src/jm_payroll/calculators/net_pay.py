"""Net pay assembly."""

from __future__ import annotations

from decimal import Decimal

from jm_payroll.calculators.types import (
    EarningsBreakdown,
    PayrollCalculationResult,
    StatutoryDeductions,
    ZERO,
    round_money,
)
from jm_payroll.errors import ValidationError


class NetPayAssembler:
    """Combines gross, statutory deductions and other deductions into net pay.

    Negative net pay is returned as-is and flagged; what to do about it is
    the caller's decision.
    """

    @staticmethod
    def assemble_net(
        gross_earnings: Decimal,
        deductions: StatutoryDeductions,
        other_deductions: Decimal,
        earnings: EarningsBreakdown | None = None,
        employer_contribution: Decimal = ZERO,
        rate_table_version: str | None = None,
        currency: str = "JMD",
    ) -> PayrollCalculationResult:
        if not other_deductions.is_finite():
            raise ValidationError(
                "other_deductions", other_deductions, "must be a finite amount"
            )
        if other_deductions < 0:
            raise ValidationError("other_deductions", other_deductions, "must be non-negative")

        # Inputs are already cent-rounded, so the sums below are exact
        gross = round_money(gross_earnings)
        other = round_money(other_deductions)
        total_deductions = (
            deductions.income_tax
            + deductions.contribution
            + deductions.education_levy
            + deductions.training_levy
            + other
        )
        net_pay = gross - total_deductions

        return PayrollCalculationResult(
            gross_earnings=gross,
            income_tax=deductions.income_tax,
            contribution=deductions.contribution,
            education_levy=deductions.education_levy,
            training_levy=deductions.training_levy,
            other_deductions=other,
            total_deductions=total_deductions,
            net_pay=net_pay,
            is_net_negative=net_pay < 0,
            earnings=earnings,
            employer_contribution=employer_contribution,
            rate_table_version=rate_table_version,
            currency=currency,
        )


def assemble_net(
    gross_earnings: Decimal,
    deductions: StatutoryDeductions,
    other_deductions: Decimal,
) -> PayrollCalculationResult:
    """Net pay result for a gross amount and its deductions."""
    return NetPayAssembler.assemble_net(gross_earnings, deductions, other_deductions)
