"""Type definitions for the gross-to-net pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any
from uuid import UUID

MONEY_PRECISION = Decimal("0.01")
ZERO = Decimal("0")


def round_money(amount: Decimal) -> Decimal:
    """Round amount to the smallest currency unit (cents), half-up."""
    return amount.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


class PayFrequency(str, Enum):
    """Pay frequencies with their periods per year."""

    MONTHLY = "monthly"

    @property
    def periods_per_year(self) -> int:
        return {PayFrequency.MONTHLY: 12}[self]


class LineType(str, Enum):
    """Payslip line item types."""

    EARNING = "EARNING"
    TAX = "TAX"
    DEDUCTION = "DEDUCTION"
    EMPLOYER_TAX = "EMPLOYER_TAX"


@dataclass(frozen=True)
class CompensationProfile:
    """Employee compensation terms, supplied by the HR collaborator."""

    base_salary: Decimal
    pay_frequency: PayFrequency = PayFrequency.MONTHLY
    overtime_eligible: bool = True
    overtime_multiplier: Decimal = Decimal("1.5")
    currency: str = "JMD"
    employee_id: str | None = None


@dataclass(frozen=True)
class PeriodInputs:
    """Per-run variable inputs for one employee-period."""

    overtime_hours: Decimal = ZERO
    allowances: Decimal = ZERO
    bonus: Decimal = ZERO
    commission: Decimal = ZERO
    other_deductions: Decimal = ZERO

    def to_canonical_dict(self) -> dict[str, str]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "overtime_hours": str(self.overtime_hours),
            "allowances": str(self.allowances),
            "bonus": str(self.bonus),
            "commission": str(self.commission),
            "other_deductions": str(self.other_deductions),
        }


@dataclass(frozen=True)
class TaxBracket:
    """Income tax band starting at an annual lower bound."""

    lower_annual_bound: Decimal
    rate: Decimal  # As decimal, e.g., 0.25 for 25%


@dataclass(frozen=True)
class EarningsBreakdown:
    """Itemised gross earnings for the period."""

    base_salary: Decimal
    overtime: Decimal
    allowances: Decimal
    bonus: Decimal
    commission: Decimal
    gross: Decimal
    overtime_hours: Decimal = ZERO
    hourly_rate: Decimal = ZERO


@dataclass(frozen=True)
class StatutoryDeductions:
    """Statutory deductions for one period, each rounded to cents."""

    income_tax: Decimal
    contribution: Decimal
    education_levy: Decimal
    training_levy: Decimal

    @property
    def total(self) -> Decimal:
        return self.income_tax + self.contribution + self.education_levy + self.training_levy


@dataclass(frozen=True)
class PayrollCalculationResult:
    """Gross-to-net result for one employee-period. Never mutated."""

    gross_earnings: Decimal
    income_tax: Decimal
    contribution: Decimal
    education_levy: Decimal
    training_levy: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    is_net_negative: bool
    earnings: EarningsBreakdown | None = None
    employer_contribution: Decimal = ZERO
    rate_table_version: str | None = None
    currency: str = "JMD"
    calculation_id: UUID | None = None

    @property
    def statutory_deductions(self) -> Decimal:
        return self.income_tax + self.contribution + self.education_levy + self.training_levy

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing and snapshots."""
        return {
            "gross_earnings": str(self.gross_earnings),
            "income_tax": str(self.income_tax),
            "contribution": str(self.contribution),
            "education_levy": str(self.education_levy),
            "training_levy": str(self.training_levy),
            "other_deductions": str(self.other_deductions),
            "total_deductions": str(self.total_deductions),
            "net_pay": str(self.net_pay),
            "is_net_negative": self.is_net_negative,
            "employer_contribution": str(self.employer_contribution),
            "rate_table_version": self.rate_table_version,
            "currency": self.currency,
        }


@dataclass
class PayLine:
    """A payslip line derived from a calculation result."""

    line_type: LineType
    code: str
    description: str
    amount: Decimal  # Signed per LineItemBuilder conventions
    quantity: Decimal | None = None
    rate: Decimal | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
