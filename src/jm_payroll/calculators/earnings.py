"""Gross earnings assembly from compensation terms and period inputs."""

from __future__ import annotations

from decimal import Decimal

from jm_payroll.calculators.types import (
    ZERO,
    CompensationProfile,
    EarningsBreakdown,
    PayFrequency,
    PeriodInputs,
    round_money,
)
from jm_payroll.errors import ValidationError

STANDARD_WEEKLY_HOURS = Decimal("40")
WEEKS_PER_PERIOD = Decimal("4")


class EarningsAssembler:
    """Combines base salary, overtime, allowances, bonus and commission.

    Overtime is paid at an hourly-equivalent rate derived from the monthly
    base salary. Employees who are not overtime-eligible get no overtime pay
    whatever hours are supplied; this is not an error.
    """

    @staticmethod
    def validate(profile: CompensationProfile, inputs: PeriodInputs) -> None:
        """Raise ValidationError for the first out-of-range field."""
        if profile.pay_frequency != PayFrequency.MONTHLY:
            raise ValidationError(
                "pay_frequency", profile.pay_frequency, "only monthly pay is supported"
            )
        _check_finite("base_salary", profile.base_salary)
        if profile.base_salary < 0:
            raise ValidationError("base_salary", profile.base_salary, "must be non-negative")
        _check_finite("overtime_multiplier", profile.overtime_multiplier)
        if profile.overtime_multiplier < 1:
            raise ValidationError(
                "overtime_multiplier", profile.overtime_multiplier, "must be at least 1"
            )

        for name in ("overtime_hours", "allowances", "bonus", "commission", "other_deductions"):
            value = getattr(inputs, name)
            _check_finite(name, value)
            if value < 0:
                raise ValidationError(name, value, "must be non-negative")

    @staticmethod
    def hourly_rate(profile: CompensationProfile) -> Decimal:
        """Hourly-equivalent rate for a monthly salary."""
        return profile.base_salary / (STANDARD_WEEKLY_HOURS * WEEKS_PER_PERIOD)

    @classmethod
    def build(cls, profile: CompensationProfile, inputs: PeriodInputs) -> EarningsBreakdown:
        """Build the itemised earnings for the period.

        Gross is the rounded sum of unrounded components; the overtime item is
        rounded for display only.
        """
        cls.validate(profile, inputs)

        rate = cls.hourly_rate(profile)
        if profile.overtime_eligible:
            overtime = inputs.overtime_hours * rate * profile.overtime_multiplier
        else:
            overtime = ZERO

        gross = (
            profile.base_salary
            + overtime
            + inputs.allowances
            + inputs.bonus
            + inputs.commission
        )

        return EarningsBreakdown(
            base_salary=profile.base_salary,
            overtime=round_money(overtime),
            allowances=inputs.allowances,
            bonus=inputs.bonus,
            commission=inputs.commission,
            gross=round_money(gross),
            overtime_hours=inputs.overtime_hours if profile.overtime_eligible else ZERO,
            hourly_rate=round_money(rate),
        )


def assemble_earnings(profile: CompensationProfile, inputs: PeriodInputs) -> Decimal:
    """Gross earnings for the period."""
    return EarningsAssembler.build(profile, inputs).gross


def _check_finite(name: str, value: Decimal) -> None:
    if not value.is_finite():
        raise ValidationError(name, value, "must be a finite amount")
