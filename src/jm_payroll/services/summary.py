"""Period totals over finalized calculation results.

Aggregation is a reporting concern: it consumes results produced by the
engine and never recomputes any of them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from jm_payroll.calculators.types import ZERO, PayrollCalculationResult, round_money
from jm_payroll.errors import ValidationError
from jm_payroll.services.payroll_entry import PayrollEntry
from jm_payroll.services.state_machine import PayrollEntryStatus

REPORTABLE_STATUSES = {PayrollEntryStatus.APPROVED, PayrollEntryStatus.PAID}


@dataclass(frozen=True)
class PeriodSummary:
    """Payroll totals for one period."""

    period: str
    employee_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    average_gross: Decimal
    total_income_tax: Decimal
    total_contribution: Decimal
    total_education_levy: Decimal
    total_training_levy: Decimal
    total_other_deductions: Decimal
    total_employer_contribution: Decimal
    negative_net_count: int = 0


def summarize_period(period: str, results: Iterable[PayrollCalculationResult]) -> PeriodSummary:
    """Aggregate results for a period (e.g. "2024-01")."""
    count = 0
    negative = 0
    totals = {
        "gross": ZERO,
        "deductions": ZERO,
        "net": ZERO,
        "income_tax": ZERO,
        "contribution": ZERO,
        "education_levy": ZERO,
        "training_levy": ZERO,
        "other": ZERO,
        "employer": ZERO,
    }
    currency: str | None = None

    for result in results:
        if currency is None:
            currency = result.currency
        elif result.currency != currency:
            raise ValidationError(
                "currency", result.currency, f"period summary is in {currency}"
            )

        count += 1
        if result.is_net_negative:
            negative += 1
        totals["gross"] += result.gross_earnings
        totals["deductions"] += result.total_deductions
        totals["net"] += result.net_pay
        totals["income_tax"] += result.income_tax
        totals["contribution"] += result.contribution
        totals["education_levy"] += result.education_levy
        totals["training_levy"] += result.training_levy
        totals["other"] += result.other_deductions
        totals["employer"] += result.employer_contribution

    average = round_money(totals["gross"] / count) if count else round_money(ZERO)

    return PeriodSummary(
        period=period,
        employee_count=count,
        total_gross=totals["gross"],
        total_deductions=totals["deductions"],
        total_net=totals["net"],
        average_gross=average,
        total_income_tax=totals["income_tax"],
        total_contribution=totals["contribution"],
        total_education_levy=totals["education_levy"],
        total_training_levy=totals["training_levy"],
        total_other_deductions=totals["other"],
        total_employer_contribution=totals["employer"],
        negative_net_count=negative,
    )


def summarize_entries(period: str, entries: Iterable[PayrollEntry]) -> PeriodSummary:
    """Aggregate approved and paid entries; other statuses are skipped."""
    return summarize_period(
        period,
        (
            e.result
            for e in entries
            if e.status in REPORTABLE_STATUSES and e.result is not None
        ),
    )
